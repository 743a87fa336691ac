"""
Create database tables.

Creates the pgvector extension (PostgreSQL only) and all ORM tables.

Usage:
    python -m course_ingest.boundary.db.create_tables

Dependencies: sqlalchemy, course_ingest.boundary.db
System role: Local/bootstrap schema setup
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from course_ingest.boundary.db.base import Base
from course_ingest.boundary.db.connection import get_async_engine
from course_ingest.boundary.db import models  # noqa: F401  (registers tables)
from course_ingest.observability import configure_logging

logger = logging.getLogger(__name__)


async def create_all(engine: AsyncEngine) -> None:
    """
    Create the vector extension and every registered table.

    Args:
        engine: Async engine to run DDL on
    """
    async with engine.begin() as conn:
        if engine.dialect.name == "postgresql":
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_all - Tables created on {engine.dialect.name}")


async def main() -> None:
    engine = get_async_engine()
    try:
        await create_all(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main())
