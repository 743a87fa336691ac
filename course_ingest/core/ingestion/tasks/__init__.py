"""
Task modules for the material ingestion pipeline.

Exports: ExtractionTask, ChunkingTask, chunk_text, EmbeddingTask, ArchivalTask
"""

from .archival_task import ArchivalTask
from .chunking_task import ChunkingTask, chunk_text, normalize_text
from .embedding_task import EmbeddingTask
from .extraction_task import ExtractionTask

__all__ = [
    "ArchivalTask",
    "ChunkingTask",
    "EmbeddingTask",
    "ExtractionTask",
    "chunk_text",
    "normalize_text",
]
