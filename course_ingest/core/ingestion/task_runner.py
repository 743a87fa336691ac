"""
In-process background runner for ingestion pipelines.

One asyncio.Task per material, tracked by material id so the same material
cannot be ingested twice concurrently and in-flight work can be cancelled
on shutdown.

Dependencies: asyncio, IngestionOrchestrator
System role: Background execution of the ingestion pipeline
"""

import asyncio
import logging
from uuid import UUID

from course_ingest.core.ingestion.models import IngestionRequest, PipelineResult
from course_ingest.core.ingestion.orchestrator import IngestionOrchestrator
from course_ingest.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class IngestionTaskRunner:
    """Spawn and track one ingestion task per material."""

    def __init__(self, orchestrator: IngestionOrchestrator) -> None:
        """
        Initialize runner.

        Args:
            orchestrator: Orchestrator every submitted material runs through
        """
        self._orchestrator = orchestrator
        self._tasks: dict[UUID, asyncio.Task] = {}

    def submit(self, request: IngestionRequest) -> asyncio.Task:
        """
        Start ingesting a material in the background.

        Must be called from within a running event loop.

        Args:
            request: Material to ingest

        Returns:
            asyncio.Task: The task running the pipeline

        Raises:
            ValueError: The material is already being ingested
        """
        if self.is_running(request.material_id):
            raise ValueError(f"Material already being ingested: {request.material_id}")

        task = asyncio.create_task(
            self._orchestrator.run(request),
            name=f"ingest-{request.material_id}",
        )
        self._tasks[request.material_id] = task
        task.add_done_callback(lambda t: self._on_done(request.material_id, t))

        logger.info(
            f"{__name__}:submit - Ingestion scheduled",
            extra={"material_id": str(request.material_id), "in_flight": len(self._tasks)},
        )
        return task

    def is_running(self, material_id: UUID) -> bool:
        """Check whether a material has an unfinished ingestion task."""
        task = self._tasks.get(material_id)
        return task is not None and not task.done()

    def in_flight(self) -> set[UUID]:
        """Material ids with unfinished ingestion tasks."""
        return {material_id for material_id, task in self._tasks.items() if not task.done()}

    def cancel(self, material_id: UUID) -> bool:
        """
        Cancel a material's ingestion.

        The orchestrator marks the material ERROR (stage "cancelled") and
        removes its temp file before the task finishes.

        Returns:
            bool: True if a running task was asked to cancel
        """
        task = self._tasks.get(material_id)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def wait_all(self) -> list[PipelineResult]:
        """
        Wait for every in-flight task to finish.

        Returns:
            list[PipelineResult]: Results of tasks that completed normally
        """
        tasks = list(self._tasks.values())
        if not tasks:
            return []
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        return [outcome for outcome in outcomes if isinstance(outcome, PipelineResult)]

    async def shutdown(self) -> None:
        """Cancel all in-flight tasks and wait for their cleanup to finish."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        if not tasks:
            return

        logger.info(f"{__name__}:shutdown - Cancelling {len(tasks)} ingestion task(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _on_done(self, material_id: UUID, task: asyncio.Task) -> None:
        """Drop the finished task and surface anything that escaped the orchestrator."""
        if self._tasks.get(material_id) is task:
            del self._tasks[material_id]

        if task.cancelled():
            logger.info(
                f"{__name__}:_on_done - Ingestion task cancelled",
                extra={"material_id": str(material_id)},
            )
            return

        exc = task.exception()
        if exc is not None:
            log_exception_with_context(
                logger,
                f"{__name__}:_on_done - Ingestion task crashed",
                exc,
                material_id=material_id,
            )
