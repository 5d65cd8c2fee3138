"""
Fetch scheduling: one cycle at start, then one per interval.

Manual triggers call straight into the acquisition service and may run
while a scheduled cycle is in progress.
"""

import asyncio

import structlog

from insight_monitor.social.acquisition import AcquisitionService
from insight_monitor.social.schemas import CycleReport, CycleTrigger

logger = structlog.get_logger(__name__)


class FetchScheduler:
    """
    Background loop driving AcquisitionService.run_cycle().

    Usage:
        scheduler = FetchScheduler(acquisition, interval_seconds=3600)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        acquisition: AcquisitionService,
        interval_seconds: float,
        run_on_start: bool = True,
    ):
        self._acquisition = acquisition
        self._interval = interval_seconds
        self._run_on_start = run_on_start
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the loop in the background. Calling twice is a no-op."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="social_fetch_scheduler")
        logger.info(
            "Fetch scheduler started",
            interval_seconds=self._interval,
            run_on_start=self._run_on_start,
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to exit."""
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("Fetch scheduler stopped")

    async def trigger(self) -> CycleReport:
        """Run a manual cycle now and return its report."""
        return await self._acquisition.run_cycle(CycleTrigger.MANUAL)

    async def _loop(self) -> None:
        if self._run_on_start:
            await self._run(CycleTrigger.STARTUP)

        while True:
            await asyncio.sleep(self._interval)
            await self._run(CycleTrigger.PERIODIC)

    async def _run(self, trigger: CycleTrigger) -> None:
        try:
            await self._acquisition.run_cycle(trigger)
        except Exception as e:
            logger.error("Scheduled fetch cycle crashed", trigger=trigger.value, error=str(e))
