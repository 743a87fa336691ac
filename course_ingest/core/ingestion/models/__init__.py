"""
Models for the material ingestion pipeline.

Exports: IngestionRequest, PipelineResult
"""

from .ingestion_request import IngestionRequest
from .pipeline_result import PipelineResult

__all__ = ["IngestionRequest", "PipelineResult"]
