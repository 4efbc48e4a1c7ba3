"""Sync engine orchestrating outbox delivery.

This module provides:
- SyncEngine: Enqueue, sync cycles, status, and dead-letter management

The engine is the "brain" of the outbox:
1. Producers enqueue mutations, which are persisted before enqueue returns
2. The scheduler triggers cycles periodically and shortly after enqueues
3. A cycle delivers eligible items one at a time, in priority order
4. Delivered items are removed, failed items keep a retry count

Cycle states:
    IDLE -> RUNNING -> IDLE

    At most one cycle runs at a time. A sync request made while a cycle is
    in flight returns False immediately instead of queuing a second cycle.

Dead letters:
    An item that failed MAX_ATTEMPTS times stays in the outbox but is no
    longer attempted. Only retry_failed_items() revives it and only
    clear_failed_items() drops it.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from possync.client.connectivity import probe_online
from possync.client.sync.outbox import OutboxStore
from possync.client.sync.scheduler import SyncScheduler
from possync.client.sync.status import StatusReporter, write_last_sync
from possync.client.sync.types import (
    CycleReport,
    EngineState,
    SyncItem,
    SyncStatus,
    utc_now,
)
from possync.core.config import EngineConfig
from possync.core.types import Priority, default_priority

if TYPE_CHECKING:
    from possync.client.connectivity import ConnectivityProbe
    from possync.client.storage import KeyValueStore
    from possync.client.sync.appliers import ApplierRegistry
    from possync.client.sync.types import Clock

logger = logging.getLogger(__name__)


class SyncEngine:
    """Offline-first outbox delivering local mutations to the server.

    Construct one engine at startup and pass it to whatever produces
    mutations or displays sync status.

    Usage:
        engine = SyncEngine(store, registry, probe)
        engine.initialize()

        engine.enqueue(ItemType.SALE, sale, Priority.HIGH)
        status = engine.get_status()

        engine.shutdown()
    """

    def __init__(
        self,
        store: KeyValueStore,
        registry: ApplierRegistry,
        probe: ConnectivityProbe,
        config: EngineConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Persistence primitive holding the outbox and last sync time
            registry: Delivery operations per item type
            probe: Connectivity probe consulted before every cycle
            config: Engine settings (defaults if omitted)
            clock: Source of aware UTC timestamps
        """
        self._config = config or EngineConfig()
        self._store = store
        self._registry = registry
        self._probe = probe
        self._clock = clock
        self._outbox = OutboxStore(store, self._config.queue_key)
        self._reporter = StatusReporter(
            probe,
            store,
            self._outbox,
            last_sync_key=self._config.last_sync_key,
            max_attempts=self._config.max_attempts,
        )
        self._scheduler = SyncScheduler(
            self._on_tick,
            interval=self._config.sync_interval,
            opportunistic_delay=self._config.opportunistic_delay,
        )

        # Single-flight guard: held for the whole of a sync_now() call
        self._cycle_lock = threading.Lock()
        # Held for every load-modify-save of the outbox, never during delivery
        self._outbox_lock = threading.Lock()
        self._state = EngineState.IDLE
        self._initialized = False
        self._last_report: CycleReport | None = None

    @property
    def config(self) -> EngineConfig:
        """Get engine configuration."""
        return self._config

    @property
    def state(self) -> EngineState:
        """Get current cycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if a cycle is delivering items."""
        return self._state == EngineState.RUNNING

    @property
    def initialized(self) -> bool:
        """Check if the engine has been initialized."""
        return self._initialized

    @property
    def scheduler(self) -> SyncScheduler:
        """Get the scheduler driving automatic cycles."""
        return self._scheduler

    @property
    def last_report(self) -> CycleReport | None:
        """Counters of the most recent completed cycle."""
        return self._last_report

    # === Lifecycle ===

    def initialize(self) -> None:
        """Start periodic sync and run one cycle if online.

        Calling it again is a no-op.
        """
        if self._initialized:
            return

        logger.info("Initializing sync engine...")
        self._scheduler.start()
        self._initialized = True

        if probe_online(self._probe):
            try:
                self.sync_now()
            except Exception:
                logger.exception("Initial sync failed")

        logger.info("Sync engine initialized")

    def shutdown(self) -> None:
        """Stop automatic sync. A cycle in flight runs to completion.

        Calling it again is a no-op.
        """
        self._scheduler.stop()
        if self._initialized:
            self._initialized = False
            logger.info("Sync engine stopped")

    def __enter__(self) -> SyncEngine:
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.shutdown()

    # === Producers ===

    def enqueue(
        self,
        item_type: str,
        payload: Any,
        priority: Priority | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SyncItem:
        """Durably record a pending mutation.

        The item is persisted before this returns; a sync is then requested
        after a short delay so that several enqueues share one cycle.

        Args:
            item_type: Item type tag (see ItemType)
            payload: JSON-serializable domain object
            priority: Delivery priority (default per item type if None)
            metadata: Optional caller annotations stored with the item

        Returns:
            The stored item

        Raises:
            OutboxPersistenceError: If the outbox cannot be saved
        """
        if priority is None:
            priority = default_priority(str(getattr(item_type, "value", item_type)))

        item = SyncItem.create(
            item_type,
            payload,
            priority=priority,
            metadata=metadata,
            now=self._clock(),
        )

        with self._outbox_lock:
            outbox = self._outbox.load()
            outbox.append(item)
            self._outbox.save(outbox)

        logger.info("Item added to sync queue: %s (%s)", item.item_type, item.id)

        self._scheduler.request_soon()
        return item

    # === Sync cycles ===

    def _on_tick(self) -> None:
        """Scheduler callback: start a cycle unless one is in flight."""
        if self.is_running:
            logger.debug("Sync already running, skipping tick")
            return
        self.sync_now()

    def sync_now(self) -> bool:
        """Run one sync cycle now.

        Returns:
            True if the cycle ran, False if another cycle was in flight
            or the device is offline

        Raises:
            OutboxPersistenceError: If the updated outbox cannot be saved
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.debug("Sync already running, skipping...")
            return False

        try:
            if not probe_online(self._probe):
                logger.debug("Offline - skipping sync")
                return False

            self._state = EngineState.RUNNING
            self._last_report = self._run_cycle()
            return True
        finally:
            self._state = EngineState.IDLE
            self._cycle_lock.release()

    def _run_cycle(self) -> CycleReport:
        """Deliver every eligible item and persist the outcome.

        Must be called with the cycle lock held. Delivery runs without the
        outbox lock, so items enqueued, cleared or revived meanwhile are
        merged into the final save rather than overwritten.
        """
        report = CycleReport(started_at=self._clock())
        max_attempts = self._config.max_attempts

        with self._outbox_lock:
            candidates = sorted(
                (i for i in self._outbox.load() if not i.is_dead_lettered(max_attempts)),
                key=SyncItem.sort_key,
            )
        delivered: set[str] = set()
        failed: dict[str, SyncItem] = {}

        if candidates:
            logger.info("Syncing %d items...", len(candidates))
        else:
            logger.debug("No pending items to sync")

        for item in candidates:
            report.attempted += 1
            try:
                self._registry.apply(item.item_type, item.payload)
            except Exception as e:
                item.record_failure(e, self._clock())
                failed[item.id] = item
                report.failed += 1
                report.errors.append(f"{item.id}: {item.last_error}")
                logger.warning(
                    "Failed to sync %s (attempt %d/%d): %s",
                    item,
                    item.attempts,
                    max_attempts,
                    item.last_error,
                )
                if item.is_dead_lettered(max_attempts):
                    logger.error("Giving up on %s until retried", item)
                continue

            delivered.add(item.id)
            report.synced += 1
            logger.debug("Synced item: %s (%s)", item.item_type, item.id)

        with self._outbox_lock:
            outbox = [
                failed.get(item.id, item)
                for item in self._outbox.load()
                if item.id not in delivered
            ]
            self._outbox.save(outbox)

        report.finished_at = self._clock()
        if report.success:
            write_last_sync(self._store, report.finished_at, self._config.last_sync_key)

        logger.info(
            "Sync completed: %d synced, %d failed", report.synced, report.failed
        )
        return report

    # === Status and dead letters ===

    def get_status(self) -> SyncStatus:
        """Get a point-in-time summary for display."""
        return self._reporter.report(running=self.is_running)

    def pending_items(self) -> list[SyncItem]:
        """Items still eligible for delivery, in delivery order."""
        max_attempts = self._config.max_attempts
        return sorted(
            (i for i in self._outbox.load() if not i.is_dead_lettered(max_attempts)),
            key=SyncItem.sort_key,
        )

    def failed_items(self) -> list[SyncItem]:
        """Dead-lettered items, oldest first."""
        max_attempts = self._config.max_attempts
        return sorted(
            (i for i in self._outbox.load() if i.is_dead_lettered(max_attempts)),
            key=lambda i: i.enqueued_at,
        )

    def clear_failed_items(self) -> int:
        """Drop every dead-lettered item.

        Returns:
            Number of items removed

        Raises:
            OutboxPersistenceError: If the outbox cannot be saved
        """
        max_attempts = self._config.max_attempts
        with self._outbox_lock:
            outbox = self._outbox.load()
            kept = [item for item in outbox if not item.is_dead_lettered(max_attempts)]
            self._outbox.save(kept)

        removed = len(outbox) - len(kept)
        logger.info("Cleared %d failed sync items", removed)
        return removed

    def retry_failed_items(self) -> int:
        """Revive dead-lettered items and attempt delivery.

        The follow-up cycle obeys the usual single-flight and connectivity
        guards, so it may not run.

        Returns:
            Number of items revived

        Raises:
            OutboxPersistenceError: If the outbox cannot be saved
        """
        max_attempts = self._config.max_attempts
        with self._outbox_lock:
            outbox = self._outbox.load()
            revived = [item for item in outbox if item.is_dead_lettered(max_attempts)]
            for item in revived:
                item.reset()
            self._outbox.save(outbox)

        logger.info("Reset %d failed items for retry", len(revived))

        self.sync_now()
        return len(revived)
