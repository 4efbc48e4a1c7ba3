"""Tests for status reporting."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from possync.client.connectivity import StaticConnectivityProbe
from possync.client.storage import MemoryKeyValueStore
from possync.client.sync.outbox import OutboxStore
from possync.client.sync.status import StatusReporter, read_last_sync, write_last_sync
from possync.client.sync.types import OutboxPersistenceError, SyncItem, SyncStatus
from possync.core.config import DEFAULT_LAST_SYNC_KEY
from possync.core.types import SyncState


def item(item_id: str, attempts: int = 0) -> SyncItem:
    return SyncItem(
        id=item_id,
        item_type="sale",
        payload={"id": item_id},
        enqueued_at=datetime(2026, 1, 1, tzinfo=UTC),
        attempts=attempts,
    )


class TestSyncState:
    """Tests for SyncState enum."""

    def test_values(self) -> None:
        """Should have correct string values."""
        assert SyncState.IDLE.value == "idle"
        assert SyncState.SYNCING.value == "syncing"
        assert SyncState.ERROR.value == "error"
        assert SyncState.OFFLINE.value == "offline"


class TestSyncStatus:
    """Tests for SyncStatus dataclass."""

    def test_default_values(self) -> None:
        """Should have sensible defaults."""
        status = SyncStatus()
        assert status.online is False
        assert status.last_sync is None
        assert status.pending_items == 0
        assert status.failed_items == 0
        assert status.running is False

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (SyncStatus(online=True, running=True), SyncState.SYNCING),
            (SyncStatus(online=False, failed_items=2), SyncState.OFFLINE),
            (SyncStatus(online=True, failed_items=2), SyncState.ERROR),
            (SyncStatus(online=True, pending_items=3), SyncState.IDLE),
        ],
    )
    def test_state(self, status: SyncStatus, expected: SyncState) -> None:
        """Should derive a single display state."""
        assert status.state == expected

    def test_to_dict(self) -> None:
        """Should convert to a JSON-friendly dictionary."""
        status = SyncStatus(
            online=True,
            last_sync=datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC),
            pending_items=4,
            failed_items=1,
        )
        assert status.to_dict() == {
            "state": "error",
            "online": True,
            "last_sync": "2026-01-02T03:04:05+00:00",
            "pending_items": 4,
            "failed_items": 1,
            "running": False,
        }


class TestLastSync:
    """Tests for the persisted last sync time."""

    def test_roundtrip(self) -> None:
        """Written time should read back unchanged."""
        store = MemoryKeyValueStore()
        when = datetime(2026, 5, 6, 7, 8, 9, tzinfo=UTC)

        write_last_sync(store, when)

        assert read_last_sync(store) == when
        assert store.get(DEFAULT_LAST_SYNC_KEY) == when.isoformat()

    def test_missing_and_garbage(self) -> None:
        """Missing or unparseable values should read as None."""
        assert read_last_sync(MemoryKeyValueStore()) is None
        assert read_last_sync(MemoryKeyValueStore({DEFAULT_LAST_SYNC_KEY: "yesterday"})) is None

    def test_naive_value_assumed_utc(self) -> None:
        """Timestamps without offset should be read as UTC."""
        store = MemoryKeyValueStore({DEFAULT_LAST_SYNC_KEY: "2026-01-01T00:00:00"})
        assert read_last_sync(store) == datetime(2026, 1, 1, tzinfo=UTC)

    def test_write_failure_raises(self) -> None:
        """Write errors should propagate as OutboxPersistenceError."""

        class ReadOnlyStore(MemoryKeyValueStore):
            def set(self, key: str, value: str) -> None:
                raise PermissionError("read-only")

        with pytest.raises(OutboxPersistenceError):
            write_last_sync(ReadOnlyStore(), datetime.now(UTC))


class TestStatusReporter:
    """Tests for StatusReporter class."""

    def test_counts_pending_and_failed(self) -> None:
        """Items should be split around the dead-letter threshold."""
        store = MemoryKeyValueStore()
        outbox = OutboxStore(store)
        outbox.save([item("a"), item("b", attempts=4), item("c", attempts=5), item("d", attempts=7)])

        status = StatusReporter(StaticConnectivityProbe(True), store, outbox).report()

        assert status.pending_items == 2
        assert status.failed_items == 2
        assert status.online is True
        assert status.running is False
        assert status.last_sync is None

    def test_custom_threshold(self) -> None:
        """The dead-letter threshold should be configurable."""
        store = MemoryKeyValueStore()
        outbox = OutboxStore(store)
        outbox.save([item("a", attempts=1), item("b", attempts=2)])

        reporter = StatusReporter(StaticConnectivityProbe(True), store, outbox, max_attempts=2)

        assert reporter.report().failed_items == 1

    def test_reports_running_flag_and_last_sync(self) -> None:
        """Running flag and last sync should be passed through."""
        store = MemoryKeyValueStore()
        when = datetime(2026, 1, 1, tzinfo=UTC)
        write_last_sync(store, when)

        status = StatusReporter(
            StaticConnectivityProbe(False), store, OutboxStore(store)
        ).report(running=True)

        assert status.running is True
        assert status.online is False
        assert status.last_sync == when

    def test_probe_failure_reports_offline(self) -> None:
        """A failing probe should read as offline."""

        class BrokenProbe:
            def is_online(self) -> bool:
                raise TimeoutError("probe timed out")

        store = MemoryKeyValueStore()
        status = StatusReporter(BrokenProbe(), store, OutboxStore(store)).report()

        assert status.online is False

    def test_report_has_no_side_effects(self) -> None:
        """Reporting should not write to storage."""
        store = MemoryKeyValueStore()
        OutboxStore(store).save([item("a")])
        snapshot = dict(store._data)

        StatusReporter(StaticConnectivityProbe(True), store, OutboxStore(store)).report()

        assert store._data == snapshot
