"""
Stale material reconciliation.

A material left PROCESSING after a crash or restart would otherwise stay
there forever. The reconciler finds materials that have not moved for
stale_after_seconds, skips any still being ingested in this process, and
marks the rest ERROR with a "reconcile" failure record.

Dependencies: sqlalchemy, course_ingest.boundary.db.CRUD
System role: Recovery of stranded materials
"""

import asyncio
import logging
from datetime import timedelta
from typing import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from course_ingest.boundary.db.base import utcnow
from course_ingest.boundary.db.CRUD.material_crud import material_crud
from course_ingest.core.exceptions import MaterialProcessingError
from course_ingest.core.ingestion.database.material_status_updater import MaterialStatusUpdater

logger = logging.getLogger(__name__)

STAGE_RECONCILE = "reconcile"


class StaleMaterialReconciler:
    """Move materials stranded in PROCESSING to ERROR."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        stale_after_seconds: float,
        interval_seconds: float = 300,
        in_flight: Callable[[], set[UUID]] | None = None,
        batch_size: int = 100,
    ) -> None:
        """
        Initialize reconciler.

        Args:
            session_factory: Async session factory
            stale_after_seconds: Age of last update after which PROCESSING is stale
            interval_seconds: Delay between periodic passes
            in_flight: Returns material ids currently being ingested (skipped)
            batch_size: Maximum materials handled per pass
        """
        self._session_factory = session_factory
        self._stale_after = timedelta(seconds=stale_after_seconds)
        self._interval = interval_seconds
        self._in_flight = in_flight or set
        self._batch_size = batch_size
        self._status_updater = MaterialStatusUpdater(session_factory)
        self._task: asyncio.Task | None = None

    async def reconcile_once(self) -> list[UUID]:
        """
        Run one reconciliation pass.

        Returns:
            list[UUID]: Materials moved to ERROR
        """
        cutoff = utcnow() - self._stale_after
        async with self._session_factory() as session:
            stale = await material_crud.get_stale_processing(
                session,
                older_than=cutoff,
                limit=self._batch_size,
            )
            candidates = [material.material_id for material in stale]

        in_flight = self._in_flight()
        reconciled: list[UUID] = []
        for material_id in candidates:
            if material_id in in_flight:
                continue
            error = MaterialProcessingError(
                f"Material stuck in processing since before {cutoff.isoformat()}",
                material_id=str(material_id),
            )
            if await self._status_updater.mark_error(material_id, STAGE_RECONCILE, error):
                reconciled.append(material_id)

        if reconciled:
            logger.warning(
                f"{__name__}:reconcile_once - Marked {len(reconciled)} stale material(s) as ERROR",
                extra={"material_ids": [str(m) for m in reconciled]},
            )
        return reconciled

    def start(self) -> None:
        """Start the periodic loop in the background."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._loop(), name="stale-material-reconciler")

    async def stop(self) -> None:
        """Stop the periodic loop."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            try:
                await self.reconcile_once()
            except Exception as e:
                logger.error(f"{__name__}:_loop - Reconciliation pass failed: {type(e).__name__}: {e}")
            await asyncio.sleep(self._interval)
