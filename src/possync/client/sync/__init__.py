"""Offline-first outbox synchronization.

Architecture:
    Producers → SyncEngine.enqueue → OutboxStore
    SyncScheduler → SyncEngine.sync_now → ApplierRegistry → server

Components:
- **OutboxStore**: Persists pending items as one JSON blob under one key
- **ApplierRegistry**: Maps an item type to the operation delivering it
- **SyncScheduler**: Periodic and debounced opportunistic sync triggers
- **SyncEngine**: Single-flight sync cycles, retry and dead-letter bookkeeping
- **StatusReporter**: Pending/failed counts, connectivity and last sync time

All public symbols are re-exported here.
"""

from possync.client.sync.appliers import ApplierRegistry, build_http_registry
from possync.client.sync.cashier import report_cashier_sale
from possync.client.sync.engine import SyncEngine
from possync.client.sync.outbox import OutboxStore
from possync.client.sync.scheduler import SyncScheduler
from possync.client.sync.status import StatusReporter, read_last_sync, write_last_sync
from possync.client.sync.types import (
    MAX_ATTEMPTS,
    Applier,
    Clock,
    CycleReport,
    EngineState,
    OutboxPersistenceError,
    SyncError,
    SyncItem,
    SyncStatus,
    UnsupportedItemTypeError,
    utc_now,
)

__all__ = [
    # Constants
    "MAX_ATTEMPTS",
    # Types and dataclasses
    "Applier",
    "Clock",
    "CycleReport",
    "EngineState",
    "SyncItem",
    "SyncStatus",
    "utc_now",
    # Errors
    "OutboxPersistenceError",
    "SyncError",
    "UnsupportedItemTypeError",
    # Components
    "ApplierRegistry",
    "OutboxStore",
    "StatusReporter",
    "SyncEngine",
    "SyncScheduler",
    # Functions
    "build_http_registry",
    "read_last_sync",
    "report_cashier_sale",
    "write_last_sync",
]
