"""
Pipeline result model for material ingestion.

Represents the outcome of one orchestrator run.

Dependencies: pydantic
System role: Return type for IngestionOrchestrator.run()
"""

from uuid import UUID

from pydantic import BaseModel, Field

from course_ingest.boundary.db.models.material_model import MaterialStatus


class PipelineResult(BaseModel):
    """Result of material ingestion pipeline execution."""

    material_id: UUID = Field(description="Material identifier")
    status: MaterialStatus = Field(description="Terminal status reached (READY or ERROR)")
    chunk_count: int = Field(default=0, description="Number of chunks persisted")
    failed_stage: str | None = Field(default=None, description="Stage that failed, if any")
    error: str | None = Field(default=None, description="Error summary, if any")
    processing_time_ms: float = Field(description="Total processing time in milliseconds")

    @property
    def succeeded(self) -> bool:
        return self.status == MaterialStatus.READY
