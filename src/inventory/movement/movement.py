"""StockMovement aggregate: one immutable ledger entry per balance change."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, String

from inventory.domain import inventory
from inventory.movement.types import MovementType


@inventory.aggregate
class StockMovement:
    product_id = Identifier(required=True)
    warehouse_location = String(required=True, max_length=100)
    movement_type = String(required=True, choices=MovementType)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True, min_value=0)
    new_quantity = Integer(required=True, min_value=0)
    reason = String(required=True, max_length=500)
    reference_id = String(max_length=255)
    created_by = String(max_length=255)
    created_at = DateTime(required=True)

    @classmethod
    def from_change(cls, change, reason, reference_id=None, created_by=None):
        """Ledger entry documenting a BalanceChange."""
        return cls(
            product_id=change.product_id,
            warehouse_location=change.warehouse_location,
            movement_type=change.movement_type.value,
            quantity=change.delta,
            previous_quantity=change.previous_quantity,
            new_quantity=change.new_quantity,
            reason=reason[:500] if reason else reason,
            reference_id=reference_id,
            created_by=created_by,
            created_at=datetime.now(UTC),
        )

