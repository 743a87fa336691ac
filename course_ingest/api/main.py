"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, course_ingest.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from course_ingest.api.deps.dependencies import get_service_cache
from course_ingest.configs import get_settings
from course_ingest.observability import configure_logging
from course_ingest.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import health_router, materials_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Starts the ingestion runner and the stale-material reconciler; on
    shutdown cancels in-flight pipelines (each marks its material ERROR).
    """
    configure_logging(get_settings().log_level)
    logger = logging.getLogger("uvicorn")

    # Startup
    cache = get_service_cache()
    _ = cache.runner
    cache.reconciler.start()
    logger.info("Ingestion runner and reconciler started")

    yield

    # Shutdown
    await cache.shutdown()
    logger.info("Ingestion runner and reconciler stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Course Material Ingestion API",
        description="PDF ingestion and embedding pipeline for course materials",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(materials_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "course_ingest.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
