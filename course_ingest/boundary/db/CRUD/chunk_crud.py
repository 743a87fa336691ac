"""
Chunk CRUD operations.

Insert-only writes plus ordered reads for downstream consumers.

Dependencies: sqlalchemy, course_ingest.boundary.db.models
System role: Chunk persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from course_ingest.boundary.db.CRUD.base_crud import BaseCRUD
from course_ingest.boundary.db.models.chunk_model import ChunkModel


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)

    async def count_for_material(self, session: AsyncSession, material_id: UUID) -> int:
        """
        Count chunk rows for a material.

        Args:
            session: Async database session
            material_id: Material UUID

        Returns:
            int: Number of chunk rows
        """
        stmt = select(func.count()).select_from(ChunkModel).where(
            ChunkModel.material_id == material_id
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def get_for_material(
        self,
        session: AsyncSession,
        material_id: UUID,
    ) -> Sequence[ChunkModel]:
        """Retrieve all chunks of a material in document order."""
        stmt = (
            select(ChunkModel)
            .where(ChunkModel.material_id == material_id)
            .order_by(ChunkModel.chunk_index, ChunkModel.chunk_id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_ordered_contents(
        self,
        session: AsyncSession,
        material_id: UUID,
        limit: int | None = None,
    ) -> list[str]:
        """
        Retrieve chunk texts in document order.

        Args:
            session: Async database session
            material_id: Material UUID
            limit: Only the first `limit` chunks (None for all)

        Returns:
            list[str]: Chunk contents
        """
        stmt = (
            select(ChunkModel.content)
            .where(ChunkModel.material_id == material_id)
            .order_by(ChunkModel.chunk_index, ChunkModel.chunk_id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())


chunk_crud = ChunkCRUD()
