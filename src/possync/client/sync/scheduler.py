"""Scheduler for automatic sync cycles.

This module provides:
- Periodic sync on a fixed interval (APScheduler background job)
- Debounced opportunistic sync shortly after an enqueue
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from possync.core.config import DEFAULT_OPPORTUNISTIC_DELAY, DEFAULT_SYNC_INTERVAL

logger = logging.getLogger(__name__)

PERIODIC_JOB_ID = "periodic_sync"


class SyncScheduler:
    """Fires sync ticks periodically and on request.

    The scheduler only decides *when* to call the tick callback. Whether a
    tick actually starts a cycle (online, not already running) is decided
    by the callback.
    """

    def __init__(
        self,
        tick: Callable[[], object],
        interval: float = DEFAULT_SYNC_INTERVAL,
        opportunistic_delay: float = DEFAULT_OPPORTUNISTIC_DELAY,
    ) -> None:
        """Initialize the scheduler.

        Args:
            tick: Called on every periodic or opportunistic trigger.
            interval: Seconds between periodic ticks.
            opportunistic_delay: Seconds between request_soon() and the tick.
        """
        self._tick = tick
        self._interval = interval
        self._opportunistic_delay = opportunistic_delay
        self._scheduler: BackgroundScheduler | None = None
        self._pending: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        """Check if the periodic timer is active."""
        return self._scheduler is not None

    @property
    def interval(self) -> float:
        """Seconds between periodic ticks."""
        return self._interval

    def _tick_job(self, reason: str) -> None:
        """Job function for scheduled ticks."""
        logger.debug("Sync tick (%s)", reason)
        try:
            self._tick()
        except Exception:
            logger.exception("Error during %s sync", reason)

    def _periodic_job(self) -> None:
        self._tick_job("periodic")

    def _opportunistic_job(self) -> None:
        with self._lock:
            # A newer request may already have replaced the timer that fired
            if self._pending is threading.current_thread():
                self._pending = None
        self._tick_job("opportunistic")

    def start(self) -> None:
        """Start the periodic timer.

        Starting again replaces the running timer.
        """
        if self._scheduler is not None:
            logger.debug("Restarting sync scheduler")
            self._shutdown_scheduler()

        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self._periodic_job,
            trigger=IntervalTrigger(seconds=self._interval),
            id=PERIODIC_JOB_ID,
            name="Periodic outbox sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info("Sync scheduler started (every %.0fs)", self._interval)

    def stop(self) -> None:
        """Stop the periodic timer and drop any pending opportunistic tick."""
        self.cancel_pending()
        if self._scheduler is not None:
            self._shutdown_scheduler()
            logger.info("Sync scheduler stopped")

    def _shutdown_scheduler(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

    def request_soon(self) -> None:
        """Schedule an opportunistic tick after the debounce delay.

        A request made while another is pending replaces it, so a burst of
        requests produces a single tick.
        """
        timer = threading.Timer(self._opportunistic_delay, self._opportunistic_job)
        timer.daemon = True
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = timer
        timer.start()

    def cancel_pending(self) -> None:
        """Cancel a pending opportunistic tick, if any."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

    @property
    def has_pending(self) -> bool:
        """Check if an opportunistic tick is waiting to fire."""
        with self._lock:
            return self._pending is not None
