"""
Material status updater.

Owns the two database writes the pipeline makes:
- persist: chunks + PROCESSING → READY in a single transaction
- fail: PROCESSING → ERROR plus a failure record, best effort

Dependencies: sqlalchemy, course_ingest.boundary.db.CRUD
System role: Database persistence layer for the ingestion pipeline
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from course_ingest.boundary.db.CRUD.chunk_crud import chunk_crud
from course_ingest.boundary.db.CRUD.failure_crud import material_failure_crud
from course_ingest.boundary.db.CRUD.material_crud import material_crud
from course_ingest.core.exceptions import PersistenceFailed

logger = logging.getLogger(__name__)


class MaterialStatusUpdater:
    """Write pipeline results and terminal statuses for course materials."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize with a session factory.

        Each operation opens its own session so a failed persist never
        poisons the session used to record the failure.

        Args:
            session_factory: Async session factory bound to the database
        """
        self._session_factory = session_factory

    async def persist_chunks_and_mark_ready(
        self,
        material_id: UUID,
        chunks: list[str],
        embeddings: list[list[float]],
    ) -> int:
        """
        Insert every chunk and mark the material READY, all or nothing.

        Args:
            material_id: Material UUID
            chunks: Chunk texts in document order
            embeddings: One vector per chunk, same order

        Returns:
            int: Number of chunk rows inserted

        Raises:
            PersistenceFailed: Any insert or the status update failed, or the
                material was no longer PROCESSING; the transaction is rolled back
        """
        if len(chunks) != len(embeddings):
            raise PersistenceFailed(
                f"Chunk/embedding count mismatch: {len(chunks)} != {len(embeddings)}",
                material_id=str(material_id),
            )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for index, (content, embedding) in enumerate(zip(chunks, embeddings)):
                        await chunk_crud.create(
                            session,
                            material_id=material_id,
                            chunk_index=index,
                            content=content,
                            embedding=embedding,
                        )

                    updated = await material_crud.mark_ready(session, material_id)
                    if not updated:
                        raise PersistenceFailed(
                            "Material is no longer PROCESSING; chunks not committed",
                            material_id=str(material_id),
                        )
        except PersistenceFailed:
            raise
        except (SQLAlchemyError, ValueError, TypeError) as e:
            raise PersistenceFailed(
                f"Chunk persistence failed: {type(e).__name__}: {e}",
                material_id=str(material_id),
            ) from e

        logger.info(
            f"{__name__}:persist_chunks_and_mark_ready - Material marked as READY",
            extra={"material_id": str(material_id), "chunk_count": len(chunks)},
        )
        return len(chunks)

    async def mark_error(self, material_id: UUID, stage: str, error: BaseException) -> bool:
        """
        Mark the material ERROR and record why. Never raises.

        The failure record is only written when the guarded update moved the
        material out of PROCESSING; READY and ERROR rows are left untouched.

        Args:
            material_id: Material UUID
            stage: Pipeline stage that failed
            error: The failure

        Returns:
            bool: True if the status changed and the record was written
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    updated = await material_crud.mark_error(session, material_id)
                    if updated:
                        await material_failure_crud.record(
                            session,
                            material_id=material_id,
                            stage=stage,
                            error_type=type(error).__name__,
                            error_message=str(error) or type(error).__name__,
                        )
        except Exception as e:
            logger.error(
                f"{__name__}:mark_error - Could not record failure: {type(e).__name__}: {e}",
                extra={"material_id": str(material_id), "stage": stage},
            )
            return False

        if not updated:
            logger.warning(
                f"{__name__}:mark_error - Material was not PROCESSING; status left unchanged",
                extra={"material_id": str(material_id), "stage": stage},
            )
            return False

        logger.info(
            f"{__name__}:mark_error - Material marked as ERROR",
            extra={"material_id": str(material_id), "stage": stage},
        )
        return True
