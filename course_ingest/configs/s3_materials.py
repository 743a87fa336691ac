"""
S3 course materials bucket configuration.

Settings for durable storage of the original uploaded PDFs.

Dependencies: pydantic_settings
System role: S3 materials bucket configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3MaterialsSettings(BaseSettings):
    """Settings for S3 course materials bucket operations."""

    model_config = SettingsConfigDict(
        env_prefix="S3_MATERIALS_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="courseforge-dev-materials",
        description="S3 bucket for original course material files",
    )
    region: str = Field(
        default="us-east-1",
        description="AWS region for S3 bucket",
    )
    key_prefix: str = Field(
        default="course_material",
        description="Top-level key prefix; keys are {prefix}/{organization_id}/{token}.{ext}",
    )
