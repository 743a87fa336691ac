"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from course_ingest.configs.base import BaseSettings
from course_ingest.configs.database import DatabaseSettings
from course_ingest.configs.embedding import EmbeddingSettings
from course_ingest.configs.ingestion import IngestionSettings
from course_ingest.configs.s3_materials import S3MaterialsSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    embedding: EmbeddingSettings = EmbeddingSettings()
    ingestion: IngestionSettings = IngestionSettings()
    s3_materials: S3MaterialsSettings = S3MaterialsSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from course_ingest.configs import get_settings
        settings = get_settings()
    """
    return Settings()
