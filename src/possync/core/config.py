"""Shared configuration classes for possync.

This module defines configuration classes used by the engine, the HTTP
transport and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

DEFAULT_SYNC_INTERVAL = 120.0  # seconds
DEFAULT_OPPORTUNISTIC_DELAY = 1.0  # seconds
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_QUEUE_KEY = "possync_sync_queue"
DEFAULT_LAST_SYNC_KEY = "possync_last_sync"


@dataclass
class ServerConfig:
    """Configuration for connecting to the back-office server.

    Used by the HTTP client (HTTPClient) and the connectivity probe
    to ensure consistent connection settings.

    Attributes:
        server_url: Base URL of the server (e.g., "https://pos.example.com").
        token: Authentication token for the device.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
        health_path: Path probed to decide whether the server is reachable.
    """

    server_url: str
    token: str
    timeout: float = 30.0
    verify_ssl: bool = True
    health_path: str = "/health"

    def __post_init__(self) -> None:
        """Normalize server URL."""
        self.server_url = self.server_url.rstrip("/")

    @property
    def health_url(self) -> str:
        """Get the absolute URL of the health endpoint."""
        return f"{self.server_url}{self.health_path}"

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS.

        Returns:
            True if server uses HTTPS.
        """
        return self.server_url.startswith("https://")


@dataclass
class EngineConfig:
    """Tuning knobs for the sync engine.

    Attributes:
        sync_interval: Seconds between periodic sync cycles.
        opportunistic_delay: Seconds to wait after an enqueue before syncing,
            so bursts of enqueues share one cycle.
        max_attempts: Failed attempts after which an item is dead-lettered.
        queue_key: Storage key holding the serialized outbox.
        last_sync_key: Storage key holding the last successful sync time.
    """

    sync_interval: float = DEFAULT_SYNC_INTERVAL
    opportunistic_delay: float = DEFAULT_OPPORTUNISTIC_DELAY
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    queue_key: str = DEFAULT_QUEUE_KEY
    last_sync_key: str = DEFAULT_LAST_SYNC_KEY

    def __post_init__(self) -> None:
        """Validate values."""
        if self.sync_interval <= 0:
            raise ValueError("sync_interval must be positive")
        if self.opportunistic_delay < 0:
            raise ValueError("opportunistic_delay must not be negative")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Create from a plain mapping, ignoring unknown keys.

        Numeric values may be given as strings (as stored by the CLI).
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for name, value in data.items():
            if name not in known or value is None:
                continue
            if name in ("sync_interval", "opportunistic_delay"):
                kwargs[name] = float(value)
            elif name == "max_attempts":
                kwargs[name] = int(value)
            else:
                kwargs[name] = str(value)
        return cls(**kwargs)
