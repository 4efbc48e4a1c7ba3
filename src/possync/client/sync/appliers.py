"""Delivery operations for queued mutations.

This module provides:
- ApplierRegistry: Maps an item type tag to the operation delivering it
- build_http_registry: Registry delivering every ItemType through HTTPClient

An applier receives the item payload and either returns (delivered) or
raises (failed). It must be idempotent from the server's point of view,
because an item can be delivered again if the process stops between a
successful remote apply and the local removal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from possync.client.sync.types import Applier, UnsupportedItemTypeError
from possync.core.types import ItemType

if TYPE_CHECKING:
    from possync.client.api import HTTPClient

logger = logging.getLogger(__name__)


def _tag(item_type: str) -> str:
    """Normalize an ItemType or plain string to its tag."""
    return str(getattr(item_type, "value", item_type))


class ApplierRegistry:
    """Registry of delivery operations keyed by item type.

    Usage:
        registry = ApplierRegistry()
        registry.register(ItemType.SALE, client.push_sale)
        registry.apply("sale", {"id": "sale-1", "total": 12.5})
    """

    def __init__(self) -> None:
        self._appliers: dict[str, Applier] = {}

    def register(self, item_type: str, applier: Applier) -> None:
        """Register the operation for an item type, replacing any previous one.

        Args:
            item_type: Item type tag (ItemType or plain string)
            applier: Callable taking the payload; raises on failure
        """
        tag = _tag(item_type)
        self._appliers[tag] = applier
        logger.debug("Registered applier for %s", tag)

    def unregister(self, item_type: str) -> None:
        """Remove the operation for an item type, if any."""
        self._appliers.pop(_tag(item_type), None)

    def supports(self, item_type: str) -> bool:
        """Check if an operation is registered for an item type."""
        return _tag(item_type) in self._appliers

    @property
    def item_types(self) -> list[str]:
        """Registered item type tags, sorted."""
        return sorted(self._appliers)

    def apply(self, item_type: str, payload: Any) -> None:
        """Deliver a payload.

        Args:
            item_type: Item type tag
            payload: Payload to deliver

        Raises:
            UnsupportedItemTypeError: If nothing is registered for item_type
            Exception: Whatever the applier raises on failure
        """
        tag = _tag(item_type)
        applier = self._appliers.get(tag)
        if applier is None:
            raise UnsupportedItemTypeError(tag)
        applier(payload)


def build_http_registry(client: HTTPClient) -> ApplierRegistry:
    """Create a registry delivering every ItemType through the HTTP API.

    Args:
        client: Connected HTTP client

    Returns:
        Registry with one applier per ItemType
    """
    registry = ApplierRegistry()
    mapping: dict[ItemType, Applier] = {
        ItemType.SALE: client.push_sale,
        ItemType.PRODUCT: client.upsert_product,
        ItemType.CUSTOMER: client.upsert_customer,
        ItemType.EMPLOYEE_CREATE: client.create_employee,
        ItemType.EMPLOYEE_UPDATE: client.update_employee,
        ItemType.EMPLOYEE_DELETE: client.delete_employee,
        ItemType.PASSWORD_CHANGE: client.change_password,
        ItemType.PASSWORD_RESET: client.reset_password,
        ItemType.CASHIER_SALE_REPORT: client.push_cashier_report,
    }
    for item_type, applier in mapping.items():
        registry.register(item_type, applier)
    return registry
