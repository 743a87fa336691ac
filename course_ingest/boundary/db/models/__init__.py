"""ORM models for course materials, chunks and failure records."""

from course_ingest.boundary.db.models.chunk_model import EMBEDDING_DIM, ChunkModel
from course_ingest.boundary.db.models.failure_model import MaterialFailureModel
from course_ingest.boundary.db.models.material_model import MaterialModel, MaterialStatus

__all__ = [
    "ChunkModel",
    "EMBEDDING_DIM",
    "MaterialFailureModel",
    "MaterialModel",
    "MaterialStatus",
]
