"""Tests for local key-value storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from possync.client.storage import MemoryKeyValueStore, SQLiteKeyValueStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "outbox.db"


class TestSQLiteKeyValueStore:
    """Tests for SQLiteKeyValueStore class."""

    def test_creates_parent_directory(self, db_path: Path) -> None:
        """Should create the database directory if missing."""
        with SQLiteKeyValueStore(db_path) as store:
            assert store.path == db_path
        assert db_path.exists()

    def test_get_missing(self, db_path: Path) -> None:
        """Unknown keys should return None."""
        with SQLiteKeyValueStore(db_path) as store:
            assert store.get("nothing") is None

    def test_set_replaces(self, db_path: Path) -> None:
        """Setting a key twice should keep the last value."""
        with SQLiteKeyValueStore(db_path) as store:
            store.set("queue", "[1]")
            store.set("queue", "[1, 2]")
            assert store.get("queue") == "[1, 2]"

    def test_values_survive_reopen(self, db_path: Path) -> None:
        """Values should be durable once set() returns."""
        with SQLiteKeyValueStore(db_path) as store:
            store.set("queue", '[{"id": "sync-1"}]')

        with SQLiteKeyValueStore(db_path) as reopened:
            assert reopened.get("queue") == '[{"id": "sync-1"}]'

    def test_delete(self, db_path: Path) -> None:
        """Deleted keys should read as missing."""
        with SQLiteKeyValueStore(db_path) as store:
            store.set("queue", "[]")
            store.delete("queue")
            store.delete("queue")
            assert store.get("queue") is None


class TestMemoryKeyValueStore:
    """Tests for MemoryKeyValueStore class."""

    def test_initial_values(self) -> None:
        store = MemoryKeyValueStore({"a": "1"})
        assert store.get("a") == "1"
        assert store.get("b") is None

    def test_set_and_delete(self) -> None:
        store = MemoryKeyValueStore()
        store.set("a", "1")
        store.set("a", "2")
        assert store.get("a") == "2"
        store.delete("a")
        assert store.get("a") is None
