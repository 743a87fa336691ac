"""
Course material CRUD operations.

Provides material-specific queries and guarded status transitions.

Dependencies: sqlalchemy, course_ingest.boundary.db.models
System role: Material persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from course_ingest.boundary.db.base import utcnow
from course_ingest.boundary.db.CRUD.base_crud import BaseCRUD
from course_ingest.boundary.db.models.material_model import MaterialModel, MaterialStatus


class MaterialCRUD(BaseCRUD[MaterialModel]):
    """
    CRUD operations for MaterialModel.

    Status changes only ever leave PROCESSING; READY and ERROR are terminal,
    so every transition is an UPDATE guarded by the current status.
    """

    def __init__(self) -> None:
        """Initialize MaterialCRUD with MaterialModel."""
        super().__init__(MaterialModel)

    async def create_processing(
        self,
        session: AsyncSession,
        organization_id: str,
        uploaded_by_user_id: str,
        file_name: str,
        s3_key: str,
    ) -> MaterialModel:
        """
        Insert a new material in PROCESSING state.

        Args:
            session: Async database session
            organization_id: Owning organization
            uploaded_by_user_id: Uploading user
            file_name: Original filename
            s3_key: Pre-assigned object storage key

        Returns:
            MaterialModel: Created material
        """
        return await self.create(
            session,
            organization_id=organization_id,
            uploaded_by_user_id=uploaded_by_user_id,
            file_name=file_name,
            s3_key=s3_key,
            status=MaterialStatus.PROCESSING,
        )

    async def transition_status(
        self,
        session: AsyncSession,
        material_id: UUID,
        new_status: MaterialStatus,
        expected_status: MaterialStatus = MaterialStatus.PROCESSING,
    ) -> bool:
        """
        Move a material from expected_status to new_status.

        Args:
            session: Async database session
            material_id: Material UUID
            new_status: Target status
            expected_status: Status the row must currently have

        Returns:
            bool: True if exactly one row changed
        """
        stmt = (
            update(MaterialModel)
            .where(
                MaterialModel.material_id == material_id,
                MaterialModel.status == expected_status,
            )
            .values(status=new_status, updated_at=utcnow())
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    async def mark_ready(self, session: AsyncSession, material_id: UUID) -> bool:
        """Mark a PROCESSING material READY."""
        return await self.transition_status(session, material_id, MaterialStatus.READY)

    async def mark_error(self, session: AsyncSession, material_id: UUID) -> bool:
        """Mark a PROCESSING material ERROR."""
        return await self.transition_status(session, material_id, MaterialStatus.ERROR)

    async def get_stale_processing(
        self,
        session: AsyncSession,
        older_than: datetime,
        limit: int | None = None,
    ) -> Sequence[MaterialModel]:
        """
        Retrieve materials still PROCESSING whose last update predates older_than.

        Args:
            session: Async database session
            older_than: Cutoff timestamp (UTC)
            limit: Maximum number of materials to return

        Returns:
            Sequence of stranded MaterialModels, oldest first
        """
        stmt = (
            select(MaterialModel)
            .where(
                MaterialModel.status == MaterialStatus.PROCESSING,
                MaterialModel.updated_at < older_than,
            )
            .order_by(MaterialModel.updated_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


material_crud = MaterialCRUD()
