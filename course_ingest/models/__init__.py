"""API request/response schemas."""

from .material import (
    MaterialExcerptResponse,
    MaterialFailureResponse,
    MaterialResponse,
    MaterialUploadResponse,
)

__all__ = [
    "MaterialExcerptResponse",
    "MaterialFailureResponse",
    "MaterialResponse",
    "MaterialUploadResponse",
]
