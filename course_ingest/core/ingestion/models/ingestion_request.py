"""
Ingestion request model.

What the upload handler hands to the pipeline for one material.

Dependencies: pydantic
System role: Contract between upload handler and orchestrator
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class IngestionRequest(BaseModel):
    """One material to ingest."""

    material_id: UUID = Field(..., description="course_materials.material_id (row already PROCESSING)")
    file_path: str = Field(..., description="Temporary local path of the uploaded PDF")
    s3_key: str = Field(..., description="Pre-assigned archival key")
    content_type: str = Field(default="application/pdf", description="MIME type for archival")

    model_config = ConfigDict(frozen=True)
