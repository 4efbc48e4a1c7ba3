"""Durable outbox of pending sync items.

This module provides:
- OutboxStore: Load/save the whole outbox as one JSON blob under one key

Persistence model:
    The outbox is read and written as a whole. There is no partial or
    transactional update and no locking here: the sync engine holds its
    own lock around every load-modify-save.

    Note: This is NOT an atomic queue. A crash between a successful
    delivery and the save that follows can re-deliver that item. Delivery
    is therefore at-least-once and appliers must be idempotent.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from possync.client.sync.types import OutboxPersistenceError, SyncItem
from possync.core.config import DEFAULT_QUEUE_KEY

if TYPE_CHECKING:
    from possync.client.storage import KeyValueStore

logger = logging.getLogger(__name__)


class OutboxStore:
    """Serializes the outbox into a key-value store.

    Attributes:
        key: Storage key holding the outbox blob
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_QUEUE_KEY) -> None:
        """Initialize the outbox store.

        Args:
            store: Persistence primitive
            key: Storage key for the serialized outbox
        """
        self._store = store
        self.key = key

    def load(self) -> list[SyncItem]:
        """Load every item in stored order.

        A missing, unreadable or corrupt blob yields an empty list; the
        failure is logged, never raised.

        Returns:
            The persisted items
        """
        try:
            raw = self._store.get(self.key)
        except Exception as e:
            logger.warning("Could not read outbox '%s', treating as empty: %s", self.key, e)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            return [SyncItem.from_dict(entry) for entry in data]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Corrupt outbox '%s', treating as empty: %s", self.key, e)
            return []

    def save(self, items: list[SyncItem]) -> None:
        """Replace the persisted outbox.

        Args:
            items: The complete outbox contents

        Raises:
            OutboxPersistenceError: If the items cannot be serialized or stored
        """
        try:
            raw = json.dumps([item.to_dict() for item in items])
            self._store.set(self.key, raw)
        except Exception as e:
            raise OutboxPersistenceError(f"Could not save outbox '{self.key}': {e}") from e

        logger.debug("Saved outbox '%s' (%d items)", self.key, len(items))
