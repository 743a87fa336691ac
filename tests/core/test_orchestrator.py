"""End-to-end tests for IngestionOrchestrator.

Runs the real extraction (fake pdftotext script), chunking, embedding
(mock OpenAI client), archival (mock S3 client) and persistence (in-memory
SQLite) for a single material.
"""

import asyncio
import os
from unittest.mock import AsyncMock

import openai
import pytest

from course_ingest.boundary.db.CRUD.chunk_crud import chunk_crud
from course_ingest.boundary.db.CRUD.failure_crud import material_failure_crud
from course_ingest.boundary.db.CRUD.material_crud import material_crud
from course_ingest.boundary.db.models import EMBEDDING_DIM, MaterialStatus
from course_ingest.core.exceptions import EmbeddingFailed
from course_ingest.core.ingestion.database import MaterialStatusUpdater
from course_ingest.core.ingestion.models import IngestionRequest
from course_ingest.core.ingestion.orchestrator import IngestionOrchestrator
from course_ingest.core.ingestion.tasks import (
    ArchivalTask,
    ChunkingTask,
    EmbeddingTask,
    ExtractionTask,
)
from course_ingest.observability.correlation import get_correlation_id


def _alphabet_text(length: int) -> str:
    return "".join(chr(ord("a") + i % 26) for i in range(length))


@pytest.fixture
def build_orchestrator(session_factory, fake_pdftotext, mock_embedding_client, mock_s3_client):
    """Factory for an orchestrator wired to test doubles."""

    def _build(timeout: float | None = None, **overrides) -> IngestionOrchestrator:
        parts = {
            "extractor": ExtractionTask(**fake_pdftotext),
            "chunker": ChunkingTask(chunk_size=1000, chunk_overlap=100),
            "embedder": EmbeddingTask(mock_embedding_client, batch_size=100, dimensions=EMBEDDING_DIM),
            "archiver": ArchivalTask(mock_s3_client),
            "status_updater": MaterialStatusUpdater(session_factory),
        }
        parts.update(overrides)
        return IngestionOrchestrator(**parts, pipeline_timeout_seconds=timeout)

    return _build


async def _load_state(session_factory, material_id):
    async with session_factory() as session:
        material = await material_crud.get_by_id(session, material_id)
        chunks = await chunk_crud.get_for_material(session, material_id)
        failures = await material_failure_crud.get_for_material(session, material_id)
        return material, chunks, failures


class TestIngestionSuccess:
    """Test the happy path."""

    @pytest.mark.asyncio
    async def test_ready_with_all_chunks_and_vectors(
        self, build_orchestrator, create_material, make_pdf, session_factory, mock_s3_client
    ) -> None:
        """Should store three chunks with full-size vectors and mark the material READY."""
        material_id = await create_material()
        path = make_pdf(_alphabet_text(2500))
        request = IngestionRequest(material_id=material_id, file_path=path, s3_key="course_material/org-1/a.pdf")

        result = await build_orchestrator().run(request)

        assert result.status == MaterialStatus.READY
        assert result.chunk_count == 3
        assert result.failed_stage is None
        assert result.succeeded

        material, chunks, failures = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.READY
        assert [c.chunk_index for c in chunks] == [0, 1, 2]
        assert [len(c.content) for c in chunks] == [1000, 1000, 700]
        assert all(len(c.embedding) == EMBEDDING_DIM for c in chunks)
        assert failures == []

        mock_s3_client.put_object.assert_called_once()
        assert mock_s3_client.put_object.call_args.kwargs["key"] == "course_material/org-1/a.pdf"
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_chunks_are_stored_in_document_order(
        self, build_orchestrator, create_material, make_pdf, session_factory
    ) -> None:
        """Should rebuild the normalized text from the stored chunks."""
        material_id = await create_material()
        text = " ".join(f"sentence-{i}" for i in range(900))
        path = make_pdf(text.replace(" ", "\n", 50))

        await build_orchestrator().run(IngestionRequest(material_id=material_id, file_path=path, s3_key="k1"))

        _, chunks, _ = await _load_state(session_factory, material_id)
        rebuilt = chunks[0].content + "".join(c.content[100:] for c in chunks[1:])
        assert rebuilt == text

    @pytest.mark.asyncio
    async def test_run_scopes_correlation_id_to_material(
        self, build_orchestrator, create_material, make_pdf
    ) -> None:
        """Should restore the caller's correlation id after the run."""
        material_id = await create_material()
        path = make_pdf("short text")

        await build_orchestrator().run(IngestionRequest(material_id=material_id, file_path=path, s3_key="k2"))

        assert get_correlation_id() == ""


class TestIngestionFailures:
    """Test that every failure ends in ERROR, no chunks and a removed temp file."""

    @pytest.mark.asyncio
    async def test_extraction_exit_code_one(
        self, build_orchestrator, create_material, make_pdf, session_factory, mock_s3_client
    ) -> None:
        """Should mark ERROR at stage extract, insert nothing and skip archival."""
        material_id = await create_material()
        path = make_pdf("FAIL corrupt")

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.status == MaterialStatus.ERROR
        assert result.failed_stage == "extract"
        assert "ExtractionFailed" in result.error

        material, chunks, failures = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []
        assert [f.stage for f in failures] == ["extract"]
        assert failures[0].error_type == "ExtractionFailed"
        assert not os.path.exists(path)
        mock_s3_client.put_object.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_document(
        self, build_orchestrator, create_material, make_pdf, session_factory, mock_embedding_client
    ) -> None:
        """Should fail at stage chunk when extraction yields only whitespace."""
        material_id = await create_material()
        path = make_pdf("  \n\f\n  ")

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.failed_stage == "chunk"
        material, chunks, _ = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []
        mock_embedding_client.embeddings.create.assert_not_called()
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_archival_failure(
        self, build_orchestrator, create_material, make_pdf, session_factory, mock_s3_client
    ) -> None:
        """Should fail at stage archive before any embedding request."""
        material_id = await create_material()
        path = make_pdf("some text")
        mock_s3_client.put_object.side_effect = OSError("disk gone")

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.failed_stage == "archive"
        material, chunks, _ = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_embedding_failure_on_later_batch(
        self, build_orchestrator, create_material, make_pdf, session_factory, mock_embedding_client
    ) -> None:
        """Should store no chunks when the second batch fails."""
        material_id = await create_material()
        path = make_pdf(_alphabet_text(900 * 150))
        original = mock_embedding_client.embeddings.create.side_effect
        calls = {"n": 0}

        async def _fail_second(model, input):
            calls["n"] += 1
            if calls["n"] == 2:
                raise openai.OpenAIError("429 rate limit")
            return await original(model=model, input=input)

        mock_embedding_client.embeddings.create.side_effect = _fail_second

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.failed_stage == "embed"
        material, chunks, failures = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []
        assert failures[0].error_type == EmbeddingFailed.__name__
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_attributed_to_current_stage(
        self, build_orchestrator, create_material, make_pdf, session_factory
    ) -> None:
        """Should record an unexpected exception against the stage it happened in."""
        material_id = await create_material()
        path = make_pdf("text")
        embedder = AsyncMock()
        embedder.embed.side_effect = RuntimeError("socket exploded")

        result = await build_orchestrator(embedder=embedder).run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.status == MaterialStatus.ERROR
        assert result.failed_stage == "embed"
        _, _, failures = await _load_state(session_factory, material_id)
        assert failures[0].error_type == "RuntimeError"
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_nth_insert_failure_rolls_back_everything(
        self, build_orchestrator, create_material, make_pdf, session_factory, monkeypatch
    ) -> None:
        """Should leave zero chunk rows when the third insert fails."""
        material_id = await create_material()
        path = make_pdf(_alphabet_text(5000))
        original_create = chunk_crud.create
        inserts = {"n": 0}

        async def _failing_create(session, **kwargs):
            inserts["n"] += 1
            if inserts["n"] == 3:
                raise ValueError("simulated insert failure")
            return await original_create(session, **kwargs)

        monkeypatch.setattr(chunk_crud, "create", _failing_create)

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.failed_stage == "persist"
        material, chunks, failures = await _load_state(session_factory, material_id)
        assert inserts["n"] == 3
        assert chunks == []
        assert material.status == MaterialStatus.ERROR
        assert failures[0].error_type == "PersistenceFailed"
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_material_no_longer_processing_is_not_overwritten(
        self, build_orchestrator, create_material, make_pdf, session_factory
    ) -> None:
        """Should refuse to commit chunks for a material already moved to ERROR."""
        material_id = await create_material()
        async with session_factory() as session:
            await material_crud.mark_error(session, material_id)
            await session.commit()
        path = make_pdf("late text")

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.failed_stage == "persist"
        material, chunks, _ = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []

    @pytest.mark.asyncio
    async def test_missing_temp_file_fails_extract_without_raising(
        self, build_orchestrator, create_material, session_factory, tmp_path
    ) -> None:
        """Should record extract failure when the temp file has vanished."""
        material_id = await create_material()

        result = await build_orchestrator().run(
            IngestionRequest(material_id=material_id, file_path=str(tmp_path / "gone.pdf"), s3_key="k")
        )

        assert result.failed_stage == "extract"
        material, _, _ = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR


class TestDeadlineAndCancellation:
    """Test per-pipeline deadline and external cancellation."""

    @pytest.mark.asyncio
    async def test_deadline_marks_timeout(
        self, build_orchestrator, create_material, make_pdf, session_factory
    ) -> None:
        """Should stop a hung extraction and record stage timeout."""
        material_id = await create_material()
        path = make_pdf("SLOW")

        result = await build_orchestrator(timeout=1.0).run(
            IngestionRequest(material_id=material_id, file_path=path, s3_key="k")
        )

        assert result.status == MaterialStatus.ERROR
        assert result.failed_stage == "timeout"
        material, chunks, failures = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []
        assert failures[0].stage == "timeout"
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_cancellation_marks_error_and_reraises(
        self, build_orchestrator, create_material, make_pdf, session_factory
    ) -> None:
        """Should record stage cancelled, remove the temp file, then re-raise."""
        material_id = await create_material()
        path = make_pdf("SLOW")
        task = asyncio.create_task(
            build_orchestrator().run(IngestionRequest(material_id=material_id, file_path=path, s3_key="k"))
        )
        await asyncio.sleep(0.5)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        material, chunks, failures = await _load_state(session_factory, material_id)
        assert material.status == MaterialStatus.ERROR
        assert chunks == []
        assert failures[0].stage == "cancelled"
        assert not os.path.exists(path)
