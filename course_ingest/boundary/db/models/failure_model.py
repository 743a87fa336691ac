"""
Material failure ORM model.

Durable record of why a material ended in ERROR. Written next to the
status-to-error update so operators can see the stage and reason.

Dependencies: sqlalchemy, course_ingest.boundary.db.base
System role: Dead-letter / failure history for ingestion
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from course_ingest.boundary.db.base import Base, UUIDMixin, utcnow

MAX_ERROR_MESSAGE_LENGTH = 2000


class MaterialFailureModel(Base, UUIDMixin):
    """
    Failure record for one ingestion attempt.

    Attributes:
        id: UUID primary key
        material_id: Failed material
        stage: Pipeline stage (extract, archive, chunk, embed, persist,
            timeout, cancelled, reconcile, submit)
        error_type: Exception class name
        error_message: Truncated error text
        created_at: When the failure was recorded
    """

    __tablename__ = "material_failures"

    material_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("course_materials.material_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    stage: Mapped[str] = mapped_column(String(32), nullable=False)

    error_type: Mapped[str] = mapped_column(String(128), nullable=False)

    error_message: Mapped[str] = mapped_column(
        String(MAX_ERROR_MESSAGE_LENGTH),
        nullable=False,
        default="",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
