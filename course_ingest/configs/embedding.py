"""
Embedding service configuration.

Settings for the OpenAI embeddings API used by the ingestion pipeline.

Dependencies: pydantic_settings
System role: Embedding client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """OpenAI embedding configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(default="", description="OpenAI API key")
    base_url: str | None = Field(
        default=None,
        description="Optional OpenAI-compatible endpoint",
    )
    embedding_model: str = Field(
        default="text-embedding-3-large",
        description="Embedding model identifier",
    )
    embedding_dimensions: int = Field(
        default=3072,
        description="Vector size produced by the model (must match chunks.embedding)",
    )
    batch_size: int = Field(
        default=100,
        description="Maximum number of chunks per embeddings request",
    )
    request_timeout_seconds: float = Field(
        default=60.0,
        description="Per-request HTTP timeout for the embeddings API",
    )
