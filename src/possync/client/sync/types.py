"""Shared types and dataclasses for the sync engine.

This module provides:
- SyncError, OutboxPersistenceError, UnsupportedItemTypeError: Exception classes
- SyncItem: One pending mutation in the outbox
- SyncStatus: Point-in-time summary for display
- EngineState, CycleReport: Engine state and per-cycle counters
- Type aliases for appliers and clocks
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from possync.core.config import DEFAULT_MAX_ATTEMPTS
from possync.core.types import Priority, SyncState

# Items with this many failed attempts are dead-lettered
MAX_ATTEMPTS = DEFAULT_MAX_ATTEMPTS

# Type alias for delivery operations: raise to signal failure
Applier = Callable[[Any], None]

# Type alias for the engine clock
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class SyncError(Exception):
    """Base exception for sync errors."""


class OutboxPersistenceError(SyncError):
    """The outbox could not be written to storage."""


class UnsupportedItemTypeError(SyncError):
    """No applier is registered for an item type."""

    def __init__(self, item_type: str) -> None:
        self.item_type = item_type
        super().__init__(f"No applier registered for item type '{item_type}'")


class EngineState(Enum):
    """State of the sync engine's cycle."""

    IDLE = "idle"
    RUNNING = "running"


def _new_item_id(now: datetime) -> str:
    """Time-based id with a random suffix."""
    return f"sync-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"


def _parse_time(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass
class SyncItem:
    """One pending mutation waiting for delivery.

    Attributes:
        id: Unique identifier assigned at enqueue time
        item_type: Tag selecting the delivery operation (see ItemType)
        payload: The domain object being synchronized (JSON-serializable)
        enqueued_at: When the item was created, never mutated
        priority: Business priority chosen by the caller
        attempts: Number of failed delivery attempts
        last_attempt_at: Time of the most recent failed attempt
        last_error: Message of the most recent failure
        metadata: Free-form caller annotations, not interpreted by the engine
    """

    id: str
    item_type: str
    payload: Any
    enqueued_at: datetime
    priority: Priority = Priority.MEDIUM
    attempts: int = 0
    last_attempt_at: datetime | None = None
    last_error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        item_type: str,
        payload: Any,
        priority: Priority = Priority.MEDIUM,
        metadata: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> SyncItem:
        """Create a new item with a generated id and zero attempts."""
        now = now or utc_now()
        return cls(
            id=_new_item_id(now),
            item_type=str(getattr(item_type, "value", item_type)),
            payload=payload,
            enqueued_at=now,
            priority=Priority(priority),
            metadata=dict(metadata or {}),
        )

    def is_dead_lettered(self, max_attempts: int = MAX_ATTEMPTS) -> bool:
        """Check if the item exhausted its retry budget."""
        return self.attempts >= max_attempts

    def sort_key(self) -> tuple[int, datetime]:
        """Delivery order: priority descending, then oldest first."""
        return (-self.priority.rank, self.enqueued_at)

    def record_failure(self, error: BaseException, now: datetime) -> None:
        """Record a failed delivery attempt."""
        self.attempts += 1
        self.last_attempt_at = now
        self.last_error = str(error) or type(error).__name__

    def reset(self) -> None:
        """Clear failure bookkeeping so the item is retried."""
        self.attempts = 0
        self.last_attempt_at = None
        self.last_error = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "item_type": self.item_type,
            "payload": self.payload,
            "enqueued_at": self.enqueued_at.isoformat(),
            "priority": self.priority.value,
            "attempts": self.attempts,
            "last_attempt_at": (
                self.last_attempt_at.isoformat() if self.last_attempt_at else None
            ),
            "last_error": self.last_error,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncItem:
        """Create from a dictionary produced by to_dict().

        Raises:
            KeyError, ValueError, TypeError: If the data is malformed.
        """
        enqueued_at = _parse_time(data["enqueued_at"])
        if enqueued_at is None:
            raise ValueError("enqueued_at is required")
        attempts = int(data.get("attempts", 0))
        if attempts < 0:
            raise ValueError("attempts must not be negative")
        return cls(
            id=str(data["id"]),
            item_type=str(data["item_type"]),
            payload=data.get("payload"),
            enqueued_at=enqueued_at,
            priority=Priority(data.get("priority", Priority.MEDIUM.value)),
            attempts=attempts,
            last_attempt_at=_parse_time(data.get("last_attempt_at")),
            last_error=data.get("last_error"),
            metadata=dict(data.get("metadata") or {}),
        )

    def __repr__(self) -> str:
        return (
            f"SyncItem({self.item_type}, id={self.id}, "
            f"priority={self.priority.value}, attempts={self.attempts})"
        )


@dataclass
class SyncStatus:
    """Point-in-time summary of the sync engine.

    Attributes:
        online: Whether the connectivity probe reported online.
        last_sync: Completion time of the last fully successful cycle.
        pending_items: Items still eligible for delivery.
        failed_items: Dead-lettered items awaiting operator action.
        running: Whether a cycle is currently delivering items.
    """

    online: bool = False
    last_sync: datetime | None = None
    pending_items: int = 0
    failed_items: int = 0
    running: bool = False

    @property
    def state(self) -> SyncState:
        """Summarize as a single display state."""
        if self.running:
            return SyncState.SYNCING
        if not self.online:
            return SyncState.OFFLINE
        if self.failed_items:
            return SyncState.ERROR
        return SyncState.IDLE

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "state": self.state.value,
            "online": self.online,
            "last_sync": self.last_sync.isoformat() if self.last_sync else None,
            "pending_items": self.pending_items,
            "failed_items": self.failed_items,
            "running": self.running,
        }


@dataclass
class CycleReport:
    """Counters for one completed sync cycle."""

    started_at: datetime
    finished_at: datetime | None = None
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every attempted item was delivered."""
        return self.failed == 0
