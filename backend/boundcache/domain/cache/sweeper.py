"""
Expiry Sweepers

Background reclamation of expired-but-unread cache entries.
Lazy expiry alone keeps reads correct; sweeping only frees memory held by
cold entries. A sweep never evicts live entries and never overlaps itself.
"""

import asyncio
import threading
from typing import Optional, TYPE_CHECKING

import structlog

from .bounded_cache import BoundedCache
from .exceptions import InvalidConfigurationException

if TYPE_CHECKING:
    from ...core.config import Settings

logger = structlog.get_logger(__name__)


class _SweepRunner:
    """Shared sweep logic guarded against concurrent runs."""

    def __init__(self, cache: BoundedCache, interval_seconds: float):
        if interval_seconds is None or interval_seconds <= 0:
            raise InvalidConfigurationException(
                "Sweep interval must be positive",
                config_key="interval_seconds",
                config_value=interval_seconds,
            )
        self.cache = cache
        self.interval_seconds = float(interval_seconds)
        self._sweep_guard = threading.Lock()
        self.sweeps_completed = 0
        self.entries_reclaimed = 0

    @classmethod
    def from_settings(
        cls, cache: BoundedCache, settings: Optional["Settings"] = None
    ):
        """Sweeper using CACHE_SWEEP_INTERVAL_SECONDS, or None when sweeping is disabled."""
        if settings is None:
            from ...core.config import get_settings

            settings = get_settings()

        interval = settings.cache_sweep_interval
        if interval is None:
            return None
        return cls(cache, interval)

    def sweep_once(self) -> int:
        """
        Run a single sweep.

        Returns the number of entries reclaimed, or 0 when another sweep
        is already in progress.
        """
        if not self._sweep_guard.acquire(blocking=False):
            logger.debug("Expiry sweep already running, skipping")
            return 0
        try:
            removed = self.cache.purge_expired()
            self.sweeps_completed += 1
            self.entries_reclaimed += removed
        finally:
            self._sweep_guard.release()

        if removed:
            logger.debug(
                "Expired cache entries reclaimed",
                removed=removed,
                size=self.cache.size(),
            )
        return removed


class ExpirySweeper(_SweepRunner):
    """
    Thread-based periodic sweeper.

    Suitable for caches shared between threads (``thread_safe=True``).
    """

    def __init__(self, cache: BoundedCache, interval_seconds: float):
        super().__init__(cache, interval_seconds)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start background sweeping."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="boundcache-expiry-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(
            "Cache expiry sweeper started", interval_seconds=self.interval_seconds
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop background sweeping and wait for the thread to exit."""
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info(
            "Cache expiry sweeper stopped",
            sweeps_completed=self.sweeps_completed,
            entries_reclaimed=self.entries_reclaimed,
        )

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.sweep_once()
            except Exception as e:
                logger.error("Cache expiry sweep failed", error=str(e))

    def __enter__(self) -> "ExpirySweeper":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


class AsyncExpirySweeper(_SweepRunner):
    """
    asyncio-based periodic sweeper.

    Suitable for single-threaded caches living inside one event loop.
    """

    def __init__(self, cache: BoundedCache, interval_seconds: float):
        super().__init__(cache, interval_seconds)
        self._sweep_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def start(self) -> None:
        """Start background sweeping."""
        if self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info(
                "Cache expiry sweeper started",
                interval_seconds=self.interval_seconds,
            )

    async def stop(self) -> None:
        """Stop background sweeping."""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
            logger.info(
                "Cache expiry sweeper stopped",
                sweeps_completed=self.sweeps_completed,
                entries_reclaimed=self.entries_reclaimed,
            )

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep_once()
            except Exception as e:
                logger.error("Cache expiry sweep failed", error=str(e))

    async def __aenter__(self) -> "AsyncExpirySweeper":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
