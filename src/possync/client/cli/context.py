"""Engine construction for CLI commands."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator

from possync.client.api import HTTPClient
from possync.client.cli.config import (
    get_database_path,
    get_engine_config,
    get_server_config,
    load_config,
)
from possync.client.connectivity import (
    ConnectivityProbe,
    HTTPConnectivityProbe,
    StaticConnectivityProbe,
)
from possync.client.storage import SQLiteKeyValueStore
from possync.client.sync import ApplierRegistry, SyncEngine, build_http_registry

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool) -> None:
    """Send possync logs to stderr (DEBUG if verbose, WARNING otherwise)."""
    possync_logger = logging.getLogger("possync")
    for handler in possync_logger.handlers[:]:
        possync_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    possync_logger.addHandler(handler)
    possync_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    possync_logger.propagate = False


@contextlib.contextmanager
def open_engine(offline: bool = False) -> Iterator[SyncEngine]:
    """Open the local outbox and build an engine around it.

    Without a configured server, or with offline=True, the engine reports
    offline and never attempts delivery; enqueue and status still work.
    """
    config = load_config()
    server_config = None if offline else get_server_config(config)

    client: HTTPClient | None = None
    probe: ConnectivityProbe
    if server_config is None:
        registry = ApplierRegistry()
        probe = StaticConnectivityProbe(online=False)
    else:
        client = HTTPClient(server_config)
        registry = build_http_registry(client)
        probe = HTTPConnectivityProbe(client)

    store = SQLiteKeyValueStore(get_database_path())
    engine = SyncEngine(store, registry, probe, config=get_engine_config(config))
    try:
        yield engine
    finally:
        engine.shutdown()
        store.close()
        if client is not None:
            client.close()
