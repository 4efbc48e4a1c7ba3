"""Cashier sale reports for the admin dashboard.

Sales rung up by a cashier are forwarded to the admin as a report, in
addition to the sale itself. Reports travel through the same outbox as
every other mutation.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from possync.client.sync.types import utc_now
from possync.core.types import ItemType, Priority

if TYPE_CHECKING:
    from possync.client.sync.engine import SyncEngine
    from possync.client.sync.types import SyncItem

logger = logging.getLogger(__name__)

CASHIER_ROLE = "cashier"
REPORT_METADATA = {"cashierSync": True, "realTimeSync": True}


def report_cashier_sale(
    engine: SyncEngine,
    sale: dict[str, Any],
    cashier: dict[str, Any],
) -> SyncItem | None:
    """Queue a sale report when the seller is a cashier.

    Args:
        engine: Engine owning the outbox.
        sale: The completed sale.
        cashier: The user who made the sale (needs id, username, role).

    Returns:
        The queued item, or None if the user is not a cashier.
    """
    if cashier.get("role") != CASHIER_ROLE:
        return None

    payload = {
        "reportId": f"cashier-report-{uuid.uuid4().hex}",
        "cashierId": cashier["id"],
        "cashierUsername": cashier.get("username"),
        "sale": sale,
        "timestamp": utc_now().isoformat(),
    }
    item = engine.enqueue(
        ItemType.CASHIER_SALE_REPORT,
        payload,
        priority=Priority.HIGH,
        metadata=dict(REPORT_METADATA),
    )
    logger.info(
        "Cashier sale queued for admin: sale=%s cashier=%s",
        sale.get("id"),
        cashier.get("username"),
    )
    return item
