"""
Shared settings base for course_ingest.

Every settings class reads the same .env file, ignores unknown keys and
matches environment variables case-insensitively.

Dependencies: pydantic_settings
System role: Common parent of the ingestion service settings
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Top-level service settings read without an env prefix."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level applied by configure_logging at startup",
    )
