"""CRUD operations for ingestion tables."""

from course_ingest.boundary.db.CRUD.base_crud import BaseCRUD
from course_ingest.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from course_ingest.boundary.db.CRUD.failure_crud import MaterialFailureCRUD, material_failure_crud
from course_ingest.boundary.db.CRUD.material_crud import MaterialCRUD, material_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "MaterialCRUD",
    "MaterialFailureCRUD",
    "chunk_crud",
    "material_crud",
    "material_failure_crud",
]
