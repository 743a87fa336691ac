"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: course_ingest.configs, course_ingest.core.ingestion, course_ingest.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from course_ingest.application.services import MaterialService
from course_ingest.boundary.db import get_async_db, get_async_session_factory
from course_ingest.configs import Settings, get_settings
from course_ingest.core.ingestion import (
    IngestionOrchestrator,
    IngestionTaskRunner,
    StaleMaterialReconciler,
    build_orchestrator,
)


class ServiceCache:
    """Container for the long-lived pipeline objects."""

    def __init__(self):
        self._orchestrator = None
        self._runner = None
        self._reconciler = None

    @property
    def orchestrator(self) -> IngestionOrchestrator:
        """Get cached ingestion orchestrator."""
        if self._orchestrator is None:
            self._orchestrator = build_orchestrator(get_settings())
        return self._orchestrator

    @property
    def runner(self) -> IngestionTaskRunner:
        """Get cached background task runner."""
        if self._runner is None:
            self._runner = IngestionTaskRunner(self.orchestrator)
        return self._runner

    @property
    def reconciler(self) -> StaleMaterialReconciler:
        """Get cached stale-material reconciler."""
        if self._reconciler is None:
            ingestion = get_settings().ingestion
            self._reconciler = StaleMaterialReconciler(
                session_factory=get_async_session_factory(),
                stale_after_seconds=ingestion.stale_after_seconds,
                interval_seconds=ingestion.reconcile_interval_seconds,
                in_flight=self.runner.in_flight,
            )
        return self._reconciler

    async def shutdown(self) -> None:
        """Stop background work, then drop all cached instances."""
        if self._reconciler is not None:
            await self._reconciler.stop()
        if self._runner is not None:
            await self._runner.shutdown()
        self._orchestrator = None
        self._runner = None
        self._reconciler = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_task_runner() -> IngestionTaskRunner:
    """Get the background ingestion runner."""
    return get_service_cache().runner


def get_material_service(
    db: AsyncSession = Depends(get_async_db),
    runner: IngestionTaskRunner = Depends(get_task_runner),
) -> MaterialService:
    """
    Get material service instance.

    Args:
        db: Async database session (injected via Depends)
        runner: Background ingestion runner (injected via Depends)

    Returns:
        MaterialService: Material service instance
    """
    return MaterialService(db=db, runner=runner)
