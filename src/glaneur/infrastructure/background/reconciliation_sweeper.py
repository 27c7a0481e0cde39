"""
Reconciliation sweeper.

Background task that periodically resolves pending collections nobody
is polling for.
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Callable, Optional

from glaneur.application.use_cases.confirmation_tracker import (
    ConfirmationTracker,
    SweepResult,
)
from glaneur.infrastructure.monitoring import get_logger

logger = get_logger(__name__)

TrackerScope = Callable[[], AbstractAsyncContextManager[ConfirmationTracker]]


class ReconciliationSweeper:
    """
    Periodic ConfirmationTracker.sweep runner.

    Each pass gets its own tracker (and database session) from the
    scope factory. A failing pass is logged and the loop carries on.
    """

    def __init__(
        self,
        tracker_scope: TrackerScope,
        interval_seconds: float = 30.0,
        batch_size: int = 50,
    ):
        """
        Initialize sweeper.

        Args:
            tracker_scope: Factory returning an async context manager
                that yields a ConfirmationTracker
            interval_seconds: Pause between passes
            batch_size: Maximum pending rows per pass
        """
        self.tracker_scope = tracker_scope
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop."""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name="reconciliation-sweeper")
        logger.info(
            "Reconciliation sweeper started",
            extra={"interval_seconds": self.interval_seconds},
        )

    async def stop(self) -> None:
        """Stop the loop and wait for the current pass to finish."""
        if self._task is None:
            return
        self._stopping.set()
        try:
            await asyncio.wait_for(self._task, timeout=self.interval_seconds + 5)
        except asyncio.TimeoutError:
            self._task.cancel()
        self._task = None
        logger.info("Reconciliation sweeper stopped")

    async def run_once(self) -> SweepResult:
        """Run a single sweep pass."""
        async with self.tracker_scope() as tracker:
            result = await tracker.sweep(limit=self.batch_size)

        if result.checked:
            logger.info(
                "Reconciliation pass finished",
                extra={
                    "checked": result.checked,
                    "confirmed": result.confirmed,
                    "failed": result.failed,
                    "still_pending": result.still_pending,
                },
            )
        return result

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Reconciliation pass failed")

            try:
                await asyncio.wait_for(
                    self._stopping.wait(), timeout=self.interval_seconds
                )
            except asyncio.TimeoutError:
                pass
