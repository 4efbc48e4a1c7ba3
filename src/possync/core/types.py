"""Shared types for possync.

This module defines enums used across the engine, the transport and the CLI.
"""

from __future__ import annotations

from enum import Enum


class SyncState(str, Enum):
    """Sync state of the device as shown to the user.

    Derived by the status reporter from the engine flag, the connectivity
    probe and the outbox contents.
    """

    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"
    OFFLINE = "offline"


class Priority(str, Enum):
    """Business priority of a queued mutation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is delivered first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class ItemType(str, Enum):
    """Kinds of mutation the point of sale records while offline."""

    SALE = "sale"
    PRODUCT = "product"
    CUSTOMER = "customer"
    EMPLOYEE_CREATE = "employee_create"
    EMPLOYEE_UPDATE = "employee_update"
    EMPLOYEE_DELETE = "employee_delete"
    PASSWORD_CHANGE = "password_change"
    PASSWORD_RESET = "password_reset"
    CASHIER_SALE_REPORT = "cashier_sale_report"


# Financial and credential changes go first, cosmetic edits last
DEFAULT_PRIORITIES: dict[ItemType, Priority] = {
    ItemType.SALE: Priority.HIGH,
    ItemType.CASHIER_SALE_REPORT: Priority.HIGH,
    ItemType.PASSWORD_CHANGE: Priority.HIGH,
    ItemType.PASSWORD_RESET: Priority.HIGH,
    ItemType.EMPLOYEE_CREATE: Priority.MEDIUM,
    ItemType.EMPLOYEE_UPDATE: Priority.MEDIUM,
    ItemType.EMPLOYEE_DELETE: Priority.MEDIUM,
    ItemType.CUSTOMER: Priority.MEDIUM,
    ItemType.PRODUCT: Priority.LOW,
}


def default_priority(item_type: str) -> Priority:
    """Get the default priority for an item type tag.

    Unknown tags fall back to MEDIUM.
    """
    try:
        return DEFAULT_PRIORITIES[ItemType(item_type)]
    except ValueError:
        return Priority.MEDIUM
