"""
Material service orchestrator.

Coordinates material registration, background ingestion and status reads.

Dependencies: course_ingest.boundary.db, course_ingest.core.ingestion
System role: Course material lifecycle orchestration
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from course_ingest.boundary.db.CRUD.chunk_crud import chunk_crud
from course_ingest.boundary.db.CRUD.failure_crud import material_failure_crud
from course_ingest.boundary.db.CRUD.material_crud import material_crud
from course_ingest.boundary.db.models import MaterialFailureModel, MaterialModel, MaterialStatus
from course_ingest.core.exceptions import MaterialNotFoundError, MaterialNotReadyError
from course_ingest.core.ingestion.models import IngestionRequest
from course_ingest.core.ingestion.task_runner import IngestionTaskRunner

logger = logging.getLogger(__name__)

STAGE_SUBMIT = "submit"


class MaterialService:
    """
    Material service orchestrator.

    Registers uploaded materials, hands them to the task runner and serves
    status and excerpt reads.
    """

    def __init__(self, db: AsyncSession, runner: IngestionTaskRunner | None = None) -> None:
        """
        Initialize material service.

        Args:
            db: AsyncSession for material metadata
            runner: Background ingestion runner (required for submit_upload)
        """
        self.db = db
        self._runner = runner

    async def submit_upload(
        self,
        organization_id: str,
        uploaded_by_user_id: str,
        file_name: str,
        s3_key: str,
        file_path: str,
    ) -> MaterialModel:
        """
        Register an uploaded material and start ingesting it.

        The PROCESSING row is committed before the pipeline starts so status
        polling finds it and the pipeline's own sessions can update it.

        Args:
            organization_id: Owning organization
            uploaded_by_user_id: Uploading user
            file_name: Original filename
            s3_key: Pre-assigned archival key
            file_path: Temp file holding the upload (owned by the pipeline after this call)

        Returns:
            MaterialModel: Material in PROCESSING state

        Raises:
            Exception: Whatever the runner raised; the committed row is moved
                to ERROR with stage "submit" first
        """
        if self._runner is None:
            raise RuntimeError("MaterialService needs an IngestionTaskRunner to submit uploads")

        material = await material_crud.create_processing(
            self.db,
            organization_id=organization_id,
            uploaded_by_user_id=uploaded_by_user_id,
            file_name=file_name,
            s3_key=s3_key,
        )
        await self.db.commit()

        try:
            self._runner.submit(
                IngestionRequest(
                    material_id=material.material_id,
                    file_path=file_path,
                    s3_key=s3_key,
                )
            )
        except Exception as e:
            await self._fail_submission(material.material_id, e)
            raise

        logger.info(
            f"{__name__}:submit_upload - Material registered and queued",
            extra={"material_id": str(material.material_id), "s3_key": s3_key},
        )
        return material

    async def get_material(self, material_id: UUID) -> MaterialModel:
        """
        Get a material by id.

        Raises:
            MaterialNotFoundError: Unknown material
        """
        material = await material_crud.get_by_id(self.db, material_id)
        if material is None:
            raise MaterialNotFoundError(str(material_id))
        return material

    async def get_failures(self, material_id: UUID) -> Sequence[MaterialFailureModel]:
        """Failure records of a material, newest first."""
        return await material_failure_crud.get_for_material(self.db, material_id)

    async def get_chunk_count(self, material_id: UUID) -> int:
        return await chunk_crud.count_for_material(self.db, material_id)

    async def get_excerpt(self, material_id: UUID, limit: int = 50) -> tuple[str, int]:
        """
        Join the first `limit` chunks of a READY material with single spaces.

        Args:
            material_id: Material UUID
            limit: Maximum number of chunks to include

        Returns:
            tuple[str, int]: Excerpt text and number of chunks used

        Raises:
            MaterialNotFoundError: Unknown material
            MaterialNotReadyError: Material is PROCESSING or ERROR
        """
        material = await self.get_material(material_id)
        if material.status != MaterialStatus.READY:
            raise MaterialNotReadyError(str(material_id), material.status.value)

        contents = await chunk_crud.get_ordered_contents(self.db, material_id, limit=limit)
        return " ".join(contents), len(contents)

    async def _fail_submission(self, material_id: UUID, error: Exception) -> None:
        """Move a registered material that never reached the runner to ERROR."""
        logger.error(
            f"{__name__}:submit_upload - Runner rejected material: {type(error).__name__}: {error}",
            extra={"material_id": str(material_id), "stage": STAGE_SUBMIT},
        )
        if await material_crud.mark_error(self.db, material_id):
            await material_failure_crud.record(
                self.db,
                material_id=material_id,
                stage=STAGE_SUBMIT,
                error_type=type(error).__name__,
                error_message=str(error) or type(error).__name__,
            )
        await self.db.commit()
