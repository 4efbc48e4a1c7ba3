"""Status reporting for the sync engine.

This module provides:
- StatusReporter: Derives a SyncStatus from connectivity, storage and outbox
- read_last_sync / write_last_sync: Persisted last-sync timestamp helpers

The reporter has no side effects: it only reads.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from possync.client.connectivity import probe_online
from possync.client.sync.types import MAX_ATTEMPTS, OutboxPersistenceError, SyncStatus
from possync.core.config import DEFAULT_LAST_SYNC_KEY

if TYPE_CHECKING:
    from possync.client.connectivity import ConnectivityProbe
    from possync.client.storage import KeyValueStore
    from possync.client.sync.outbox import OutboxStore

logger = logging.getLogger(__name__)


def read_last_sync(store: KeyValueStore, key: str = DEFAULT_LAST_SYNC_KEY) -> datetime | None:
    """Read the last successful sync time.

    Returns:
        The stored time, or None if never synced or unreadable.
    """
    try:
        raw = store.get(key)
        if not raw:
            return None
        value = datetime.fromisoformat(raw)
    except Exception as e:
        logger.warning("Could not read last sync time: %s", e)
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def write_last_sync(
    store: KeyValueStore,
    when: datetime,
    key: str = DEFAULT_LAST_SYNC_KEY,
) -> None:
    """Persist the last successful sync time.

    Raises:
        OutboxPersistenceError: If the store rejects the write.
    """
    try:
        store.set(key, when.isoformat())
    except Exception as e:
        raise OutboxPersistenceError(f"Could not save last sync time: {e}") from e


class StatusReporter:
    """Builds point-in-time SyncStatus snapshots.

    Usage:
        reporter = StatusReporter(probe, store, outbox)
        status = reporter.report(running=False)
        print(status.pending_items, status.failed_items)
    """

    def __init__(
        self,
        probe: ConnectivityProbe,
        store: KeyValueStore,
        outbox: OutboxStore,
        last_sync_key: str = DEFAULT_LAST_SYNC_KEY,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self._probe = probe
        self._store = store
        self._outbox = outbox
        self._last_sync_key = last_sync_key
        self._max_attempts = max_attempts

    def report(self, running: bool = False) -> SyncStatus:
        """Compute the current status.

        Args:
            running: Whether the engine is currently in a cycle.

        Returns:
            A fresh SyncStatus.
        """
        items = self._outbox.load()
        failed = sum(1 for item in items if item.is_dead_lettered(self._max_attempts))
        return SyncStatus(
            online=probe_online(self._probe),
            last_sync=read_last_sync(self._store, self._last_sync_key),
            pending_items=len(items) - failed,
            failed_items=failed,
            running=running,
        )
