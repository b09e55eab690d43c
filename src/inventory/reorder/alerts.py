"""Event handler that surfaces LowStockDetected events in the service log.

Reorder alerts stay pull-based (see ``inventory.reorder.monitor``); this
handler only makes the moment a record crosses into the reorder band visible
to whoever watches the logs.
"""

import structlog
from protean.utils.mixins import handle

from inventory.domain import inventory
from inventory.ledger.events import LowStockDetected
from inventory.ledger.record import InventoryRecord
from inventory.reorder.severity import AlertSeverity

logger = structlog.get_logger(__name__)


@inventory.event_handler(part_of=InventoryRecord)
class ReorderAlertHandler:
    @handle(LowStockDetected)
    def on_low_stock_detected(self, event: LowStockDetected) -> None:
        fields = {
            "product_id": str(event.product_id),
            "warehouse_location": event.warehouse_location,
            "severity": event.severity,
            "available": event.current_available,
            "reorder_level": event.reorder_level,
            "deficit": event.deficit,
        }
        if event.severity == AlertSeverity.LOW.value:
            logger.info("Stock is running low", **fields)
        else:
            logger.warning("Stock needs reordering urgently", **fields)
