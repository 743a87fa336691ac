"""
Material ingestion orchestrator.

Runs one uploaded PDF through extract -> archive -> chunk -> embed -> persist
and drives the material's status out of PROCESSING exactly once:
READY when chunks are committed, ERROR (plus a failure record) otherwise.
The temp file is removed on every path.

Dependencies: task modules, MaterialStatusUpdater
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass

from course_ingest.boundary.db.models.material_model import MaterialStatus
from course_ingest.core.exceptions import EmptyDocument, MaterialProcessingError, PipelineTimeout
from course_ingest.core.ingestion.database.material_status_updater import MaterialStatusUpdater
from course_ingest.core.ingestion.models import IngestionRequest, PipelineResult
from course_ingest.core.ingestion.tasks import (
    ArchivalTask,
    ChunkingTask,
    EmbeddingTask,
    ExtractionTask,
)
from course_ingest.observability.correlation import correlation_id_ctx
from course_ingest.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

STAGE_CANCELLED = "cancelled"


@dataclass
class _RunState:
    """Progress of one run, read when a step fails unexpectedly."""

    stage: str = "extract"
    chunk_count: int = 0


class IngestionOrchestrator:
    """Orchestrate material ingestion for one material at a time per call."""

    def __init__(
        self,
        extractor: ExtractionTask,
        chunker: ChunkingTask,
        embedder: EmbeddingTask,
        archiver: ArchivalTask,
        status_updater: MaterialStatusUpdater,
        pipeline_timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize orchestrator with its collaborators.

        Args:
            extractor: PDF text extraction
            chunker: Text chunking
            embedder: Batched embedding generation
            archiver: Original-file archival
            status_updater: Chunk persistence and status writes
            pipeline_timeout_seconds: Deadline for extract..persist (None = no deadline)
        """
        self._extractor = extractor
        self._chunker = chunker
        self._embedder = embedder
        self._archiver = archiver
        self._status_updater = status_updater
        self._timeout = pipeline_timeout_seconds

    async def run(self, request: IngestionRequest) -> PipelineResult:
        """
        Process one material end to end.

        Pipeline failures are recorded and reported in the result, not raised.

        Args:
            request: Material id, temp file path and archival key

        Returns:
            PipelineResult: READY with chunk count, or ERROR with failed stage

        Raises:
            asyncio.CancelledError: Re-raised after the material is marked
                ERROR and the temp file removed
        """
        start_time = time.perf_counter()
        token = correlation_id_ctx.set(str(request.material_id))
        state = _RunState()

        logger.info(
            f"{__name__}:run - Ingestion started",
            extra={"material_id": str(request.material_id), "s3_key": request.s3_key},
        )

        try:
            try:
                await asyncio.wait_for(self._execute(request, state), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                raise PipelineTimeout(
                    self._timeout,
                    material_id=str(request.material_id),
                ) from e

        except asyncio.CancelledError as e:
            logger.warning(
                f"{__name__}:run - Ingestion cancelled during {state.stage}",
                extra={"material_id": str(request.material_id)},
            )
            await self._status_updater.mark_error(request.material_id, STAGE_CANCELLED, e)
            raise

        except MaterialProcessingError as e:
            logger.error(
                f"{__name__}:run - {type(e).__name__} at {e.stage}: {e}",
                extra={"material_id": str(request.material_id), "stage": e.stage},
            )
            await self._status_updater.mark_error(request.material_id, e.stage, e)
            return self._result(request, start_time, MaterialStatus.ERROR, e.stage, e)

        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:run - Unexpected failure at {state.stage}",
                e,
                material_id=request.material_id,
                stage=state.stage,
            )
            await self._status_updater.mark_error(request.material_id, state.stage, e)
            return self._result(request, start_time, MaterialStatus.ERROR, state.stage, e)

        else:
            result = self._result(
                request,
                start_time,
                MaterialStatus.READY,
                chunk_count=state.chunk_count,
            )
            logger.info(
                f"{__name__}:run - Ingestion completed in {result.processing_time_ms:.0f}ms",
                extra={
                    "material_id": str(request.material_id),
                    "chunk_count": state.chunk_count,
                },
            )
            return result

        finally:
            self._remove_temp_file(request.file_path)
            correlation_id_ctx.reset(token)

    async def _execute(self, request: IngestionRequest, state: _RunState) -> None:
        """Run the pipeline steps in order, recording the current stage."""
        state.stage = "extract"
        text = await self._extractor.extract(request.file_path)

        state.stage = "archive"
        await self._archiver.archive(request.file_path, request.s3_key, request.content_type)

        state.stage = "chunk"
        chunks = self._chunker.chunk(text)
        if not chunks:
            raise EmptyDocument(
                "No text extracted from document",
                material_id=str(request.material_id),
            )
        logger.info(
            f"{__name__}:_execute - Created {len(chunks)} chunks",
            extra={"material_id": str(request.material_id)},
        )

        state.stage = "embed"
        embeddings = await self._embedder.embed(chunks)

        state.stage = "persist"
        state.chunk_count = await self._status_updater.persist_chunks_and_mark_ready(
            request.material_id,
            chunks,
            embeddings,
        )

    def _result(
        self,
        request: IngestionRequest,
        start_time: float,
        status: MaterialStatus,
        failed_stage: str | None = None,
        error: BaseException | None = None,
        chunk_count: int = 0,
    ) -> PipelineResult:
        return PipelineResult(
            material_id=request.material_id,
            status=status,
            chunk_count=chunk_count,
            failed_stage=failed_stage,
            error=f"{type(error).__name__}: {error}" if error is not None else None,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
        )

    def _remove_temp_file(self, file_path: str) -> None:
        try:
            os.remove(file_path)
        except FileNotFoundError:
            logger.warning(f"{__name__}:_remove_temp_file - Temp file already gone: {file_path}")
        except OSError as e:
            logger.error(f"{__name__}:_remove_temp_file - Could not remove {file_path}: {e}")
