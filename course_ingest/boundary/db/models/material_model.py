"""
Course material ORM model.

Represents one uploaded source document and its ingestion status.

Dependencies: sqlalchemy, course_ingest.boundary.db.base
System role: Material status record read by course/module creation
"""

import enum
import uuid

from sqlalchemy import Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from course_ingest.boundary.db.base import Base, TimestampMixin


class MaterialStatus(str, enum.Enum):
    """
    Material ingestion lifecycle states.

    PROCESSING: Row inserted by the upload handler; pipeline running
    READY: Full chunk set embedded and committed
    ERROR: Pipeline failed at some stage; see material_failures for why

    READY and ERROR are terminal.
    """

    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class MaterialModel(Base, TimestampMixin):
    """
    Course material ORM model.

    Lifecycle: upload handler inserts PROCESSING, the ingestion pipeline is
    the only writer that moves it to READY or ERROR (the stale-material
    reconciler may also move a stranded row to ERROR). Failure reasons are
    not stored here.

    Attributes:
        material_id: UUID primary key
        organization_id: Owning organization
        uploaded_by_user_id: Uploading user
        file_name: Original filename
        s3_key: Object storage key of the archived original
        status: MaterialStatus
    """

    __tablename__ = "course_materials"

    material_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    uploaded_by_user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Original filename",
    )

    s3_key: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        unique=True,
        doc="Object storage key for the original PDF",
    )

    status: Mapped[MaterialStatus] = mapped_column(
        Enum(
            MaterialStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=MaterialStatus.PROCESSING,
        index=True,
    )

    chunks = relationship(
        "ChunkModel",
        back_populates="material",
        order_by="ChunkModel.chunk_index",
        passive_deletes=True,
    )
