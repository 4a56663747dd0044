"""Periodic and manual refresh with latest-generation-wins ordering."""

import asyncio
from typing import Awaitable, Callable, Generic, Optional, Set, TypeVar

from ..exceptions import MetricsDashboardError
from ..utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RefreshScheduler(Generic[T]):
    """
    Runs a refresh coroutine on a fixed interval and on request.

    Every refresh, periodic or manual, gets a generation number when it is
    issued. Refreshes run concurrently and are never cancelled. A completed
    refresh is applied only if it is newer than the last applied one, so a
    slow stale response can never overwrite newer data, and results keep
    landing even when every fetch outlasts the interval.

    Not thread-safe; use from the event loop thread only.
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[T]],
        on_result: Callable[[T, int], None],
        interval: float,
        on_error: Optional[Callable[[Exception, int], None]] = None,
    ):
        """
        Args:
            refresh: Coroutine factory producing one refresh result
            on_result: Called with (result, generation) for applied results
            interval: Seconds between periodic refreshes
            on_error: Called with (error, generation) for failed refreshes
                that are newer than the last applied result
        """
        if interval <= 0:
            raise ValueError(f"Refresh interval must be positive, got {interval}")
        self._refresh = refresh
        self._on_result = on_result
        self._on_error = on_error
        self.interval = interval
        self._issued = 0
        self._applied = 0
        self._timer_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def latest_generation(self) -> int:
        return self._issued

    @property
    def applied_generation(self) -> int:
        return self._applied

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def start(self) -> None:
        """Start the periodic timer; the first refresh is issued immediately."""
        if self.running:
            return
        self._timer_task = asyncio.get_running_loop().create_task(self._run_periodic())
        logger.info(f"Refresh scheduler started (every {self.interval}s)")

    async def stop(self) -> None:
        """Cancel the periodic timer. In-flight refreshes keep running."""
        if self._timer_task is None:
            return
        self._timer_task.cancel()
        try:
            await self._timer_task
        except asyncio.CancelledError:
            pass
        self._timer_task = None
        logger.info("Refresh scheduler stopped")

    def request_refresh(self) -> int:
        """Issue a manual refresh and return its generation."""
        return self._launch("manual")

    async def wait_idle(self) -> None:
        """Wait until every issued refresh has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run_periodic(self) -> None:
        while True:
            self._launch("periodic")
            await asyncio.sleep(self.interval)

    def _launch(self, reason: str) -> int:
        self._issued += 1
        generation = self._issued
        task = asyncio.get_running_loop().create_task(self._execute(generation, reason))
        self._tasks.add(task)
        task.add_done_callback(self._done_callback)
        logger.debug(f"Issued {reason} refresh #{generation}")
        return generation

    def _done_callback(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        # cancelled() first; exception() raises CancelledError on a cancelled task
        if not task.cancelled() and task.exception() is not None:
            error = task.exception()
            logger.error(
                f"Refresh task failed while applying its result: {error!r}",
                exc_info=(type(error), error, error.__traceback__),
            )

    async def _execute(self, generation: int, reason: str) -> None:
        try:
            result = await self._refresh()
        except MetricsDashboardError as e:
            logger.error(f"{reason.capitalize()} refresh #{generation} failed: {e}")
            self._report_error(e, generation)
            return
        except Exception as e:
            logger.exception(f"Unexpected error in {reason} refresh #{generation}")
            self._report_error(e, generation)
            return

        if generation <= self._applied:
            logger.info(
                f"Discarding {reason} refresh #{generation}; #{self._applied} is already applied"
            )
            return

        self._applied = generation
        self._on_result(result, generation)

    def _report_error(self, error: Exception, generation: int) -> None:
        if self._on_error is not None and generation > self._applied:
            self._on_error(error, generation)
