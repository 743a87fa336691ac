"""Database boundary: engine/session management, ORM models and CRUD."""

from course_ingest.boundary.db.connection import (
    create_session_factory,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)

__all__ = [
    "create_session_factory",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
]
