"""
Course material ingestion pipeline.

extract (pdftotext) -> archive (S3) -> chunk -> embed (OpenAI) -> persist (Postgres/pgvector)

Exports: IngestionOrchestrator, IngestionTaskRunner, StaleMaterialReconciler,
build_orchestrator, IngestionRequest, PipelineResult
"""

from .factory import build_orchestrator
from .models import IngestionRequest, PipelineResult
from .orchestrator import IngestionOrchestrator
from .reconciler import StaleMaterialReconciler
from .task_runner import IngestionTaskRunner

__all__ = [
    "IngestionOrchestrator",
    "IngestionRequest",
    "IngestionTaskRunner",
    "PipelineResult",
    "StaleMaterialReconciler",
    "build_orchestrator",
]
