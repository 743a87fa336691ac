"""
Configuration settings for the material ingestion pipeline.

Provides environment-based configuration for extraction, chunking,
deadlines, reconciliation and upload handling.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for the material ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size: int = Field(
        default=1000,
        description="Chunk length in characters",
    )
    chunk_overlap: int = Field(
        default=100,
        description="Overlap between consecutive chunks",
    )

    # Extraction settings
    pdftotext_path: str = Field(
        default="pdftotext",
        description="Text extraction executable (poppler-utils)",
    )
    read_block_size: int = Field(
        default=64 * 1024,
        description="Bytes read from the extractor's stdout per await",
    )

    # Deadlines and reconciliation
    pipeline_timeout_seconds: float = Field(
        default=900.0,
        description="Deadline for one material's pipeline run",
    )
    stale_after_seconds: int = Field(
        default=3600,
        description="Age after which a material still 'processing' is considered stranded",
    )
    reconcile_interval_seconds: int = Field(
        default=300,
        description="Period of the stale-material reconciliation loop",
    )

    # Upload handling
    upload_dir: str = Field(
        default="",
        description="Directory for temporary uploads (system temp dir when empty)",
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Largest accepted upload",
    )

    @model_validator(mode="after")
    def check_stale_window(self) -> "IngestionSettings":
        """Reject a stale window that a live pipeline could outlast."""
        if self.stale_after_seconds <= self.pipeline_timeout_seconds:
            raise ValueError(
                f"stale_after_seconds ({self.stale_after_seconds}) must be greater than "
                f"pipeline_timeout_seconds ({self.pipeline_timeout_seconds})"
            )
        return self
