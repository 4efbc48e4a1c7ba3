"""Connectivity probing for the sync client.

This module provides:
- ConnectivityProbe: Protocol answering "can we reach the server right now?"
- HTTPConnectivityProbe: Probe backed by the server health endpoint
- StaticConnectivityProbe: Probe with a settable answer (CLI --offline, tests)
- probe_online: Conservative wrapper treating probe errors as offline
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from possync.client.api import HTTPClient

logger = logging.getLogger(__name__)


class ConnectivityProbe(Protocol):
    """Protocol for network reachability checks."""

    def is_online(self) -> bool:
        """Return True if the remote system is reachable."""
        ...


class HTTPConnectivityProbe:
    """Reports online when the server health check succeeds."""

    def __init__(self, client: HTTPClient) -> None:
        self._client = client

    def is_online(self) -> bool:
        return self._client.health_check()


class StaticConnectivityProbe:
    """Probe returning a fixed, settable answer."""

    def __init__(self, online: bool = True) -> None:
        self.online = online

    def is_online(self) -> bool:
        return self.online


def probe_online(probe: ConnectivityProbe) -> bool:
    """Query a probe, treating any failure as offline.

    Args:
        probe: The connectivity probe to query.

    Returns:
        True only if the probe answered and reported online.
    """
    try:
        return bool(probe.is_online())
    except Exception as e:
        logger.warning("Connectivity probe failed, assuming offline: %s", e)
        return False
