"""
Course material schemas.

Response schemas for material upload, status polling and excerpts.

Dependencies: pydantic
System role: Material API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from course_ingest.boundary.db.models.material_model import MaterialStatus


class MaterialFailureResponse(BaseModel):
    """Why a material ended in ERROR."""

    model_config = ConfigDict(from_attributes=True)

    stage: str
    error_type: str
    error_message: str
    created_at: datetime


class MaterialResponse(BaseModel):
    """Material metadata and processing status."""

    model_config = ConfigDict(from_attributes=True)

    material_id: uuid.UUID
    organization_id: str
    uploaded_by_user_id: str
    file_name: str
    s3_key: str
    status: MaterialStatus
    created_at: datetime
    updated_at: datetime
    chunk_count: int | None = Field(default=None, description="Chunks stored (READY only)")
    failure: MaterialFailureResponse | None = Field(
        default=None,
        description="Most recent failure record (ERROR only)",
    )


class MaterialUploadResponse(BaseModel):
    """Returned with 202 once an upload is accepted for processing."""

    material_id: uuid.UUID
    status: MaterialStatus
    file_name: str
    s3_key: str
    message: str = "Material accepted for processing. Poll /materials/{material_id} for status."


class MaterialExcerptResponse(BaseModel):
    """Bounded excerpt of a READY material's text, in chunk order."""

    material_id: uuid.UUID
    chunk_count: int = Field(description="Chunks included in the excerpt")
    content: str
