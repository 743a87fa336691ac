"""
Material failure CRUD operations.

Dependencies: sqlalchemy, course_ingest.boundary.db.models
System role: Failure record persistence
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from course_ingest.boundary.db.CRUD.base_crud import BaseCRUD
from course_ingest.boundary.db.models.failure_model import (
    MAX_ERROR_MESSAGE_LENGTH,
    MaterialFailureModel,
)


class MaterialFailureCRUD(BaseCRUD[MaterialFailureModel]):
    """CRUD operations for MaterialFailureModel."""

    def __init__(self) -> None:
        super().__init__(MaterialFailureModel)

    async def record(
        self,
        session: AsyncSession,
        material_id: UUID,
        stage: str,
        error_type: str,
        error_message: str,
    ) -> MaterialFailureModel:
        """
        Record why a material failed.

        Args:
            session: Async database session
            material_id: Failed material
            stage: Pipeline stage that failed
            error_type: Exception class name
            error_message: Error text (truncated to column size)

        Returns:
            MaterialFailureModel: Created record
        """
        return await self.create(
            session,
            material_id=material_id,
            stage=stage,
            error_type=error_type,
            error_message=error_message[:MAX_ERROR_MESSAGE_LENGTH],
        )

    async def get_for_material(
        self,
        session: AsyncSession,
        material_id: UUID,
    ) -> Sequence[MaterialFailureModel]:
        """Retrieve failure records for a material, newest first."""
        stmt = (
            select(MaterialFailureModel)
            .where(MaterialFailureModel.material_id == material_id)
            .order_by(MaterialFailureModel.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


material_failure_crud = MaterialFailureCRUD()
