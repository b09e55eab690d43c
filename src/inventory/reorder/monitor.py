"""Reorder monitoring: low-stock and out-of-stock severity derived from balances.

Nothing here is persisted. Severity is recomputed from the current
InventoryRecord balances every time it is read.
"""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from inventory.ledger.record import InventoryRecord
from inventory.reorder.severity import AlertSeverity, classify

# Most urgent first
_SEVERITY_RANK = {
    AlertSeverity.OUT_OF_STOCK: 0,
    AlertSeverity.CRITICAL: 1,
    AlertSeverity.LOW: 2,
}


@dataclass(frozen=True)
class ReorderAlert:
    product_id: str
    warehouse_location: str
    sku: str | None
    product_name: str | None
    available: int
    reorder_level: int
    reorder_quantity: int
    severity: AlertSeverity

    @property
    def deficit(self) -> int:
        return max(0, self.reorder_level - self.available)

    @property
    def suggested_order_quantity(self) -> int:
        return max(self.reorder_quantity, self.deficit)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "warehouse_location": self.warehouse_location,
            "sku": self.sku,
            "product_name": self.product_name,
            "available": self.available,
            "reorder_level": self.reorder_level,
            "reorder_quantity": self.reorder_quantity,
            "severity": self.severity.value,
            "deficit": self.deficit,
            "suggested_order_quantity": self.suggested_order_quantity,
        }


def alert_for(record) -> ReorderAlert | None:
    """Build the alert for an InventoryRecord, or None when it is adequately stocked."""
    severity = classify(record.quantity_available, record.reorder_level)
    if severity is None:
        return None
    return ReorderAlert(
        product_id=str(record.product_id),
        warehouse_location=record.warehouse_location,
        sku=record.sku,
        product_name=record.product_name,
        available=record.quantity_available,
        reorder_level=record.reorder_level,
        reorder_quantity=record.reorder_quantity,
        severity=severity,
    )


def _alerts(**filters) -> list[ReorderAlert]:
    records = current_domain.repository_for(InventoryRecord).iter_records(**filters)
    alerts = [alert for alert in map(alert_for, records) if alert is not None]
    alerts.sort(key=lambda a: (a.available, _SEVERITY_RANK[a.severity], a.product_id, a.warehouse_location))
    return alerts


def _location(warehouse_location) -> dict:
    return {"warehouse_location": warehouse_location} if warehouse_location else {}


def low_stock(warehouse_location: str | None = None, limit: int | None = None) -> list[ReorderAlert]:
    """All alerts at or below their reorder level, lowest available first."""
    alerts = _alerts(**_location(warehouse_location))
    return alerts[:limit] if limit else alerts


def out_of_stock(warehouse_location: str | None = None) -> list[ReorderAlert]:
    return _alerts(quantity_available=0, **_location(warehouse_location))


def alert_summary(warehouse_location: str | None = None) -> dict:
    """Count of alerts per severity."""
    summary = {severity.value: 0 for severity in AlertSeverity}
    for alert in low_stock(warehouse_location):
        summary[alert.severity.value] += 1
    summary["total"] = sum(summary.values())
    return summary
