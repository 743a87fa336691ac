"""
Chunk ORM model.

One unit of extracted, embedded text belonging to a course material.
Row order (chunk_index, then chunk_id) reconstructs document order.

Dependencies: sqlalchemy, pgvector, course_ingest.configs
System role: Embedded chunk persistence
"""

import uuid
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from course_ingest.boundary.db.base import Base, utcnow
from course_ingest.configs import get_settings

EMBEDDING_DIM = get_settings().embedding.embedding_dimensions


class ChunkModel(Base):
    """
    Chunk ORM model.

    Created only inside the ingestion transaction, all-or-nothing per
    material. Never updated.

    Attributes:
        chunk_id: Autoincrement primary key (insertion order)
        material_id: Parent course material
        chunk_index: Position in the material's chunk sequence
        content: Chunk text
        embedding: Fixed-dimension vector, non-null
    """

    __tablename__ = "chunks"

    chunk_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    material_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("course_materials.material_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    embedding = mapped_column(Vector(EMBEDDING_DIM), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    material = relationship("MaterialModel", back_populates="chunks")
