"""Local key-value persistence for the sync client.

This module provides:
- KeyValueStore: Protocol for the get/set-by-key string store the engine uses
- SQLiteKeyValueStore: SQLite-backed store for devices
- MemoryKeyValueStore: In-memory store for tests and ephemeral runs

Architecture:
    The engine never updates part of a record. Each key holds one opaque
    string (a JSON document) that is replaced as a whole on every write.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Protocol for the persistence primitive consumed by the engine."""

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under key."""
        ...


class SQLiteKeyValueStore:
    """SQLite-based key-value store.

    One row per key; writes are committed immediately (autocommit) so a
    value is durable once set() returns.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store database.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Lock for thread-safe database access
        self._lock = threading.RLock()

        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )

        # Enable WAL mode for better concurrency
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        logger.debug("Opened key-value store at %s", self._db_path)

    @property
    def path(self) -> Path:
        """Get the database path."""
        return self._db_path

    def get(self, key: str) -> str | None:
        """Get the value for a key.

        Args:
            key: Storage key.

        Returns:
            Stored string or None if the key was never set.
        """
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Set the value for a key, replacing any previous value.

        Args:
            key: Storage key.
            value: String to store.
        """
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                (key, value),
            )

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        with self._lock:
            self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SQLiteKeyValueStore:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()


class MemoryKeyValueStore:
    """In-memory key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
