"""InventoryRecord aggregate (CQRS): the stock balance of one product at one warehouse.

Every on-hand unit is either allocated to an outstanding reference (usually
an order) or available for sale, so the three balance columns always satisfy

    quantity_on_hand == quantity_allocated + quantity_available

Balances only change through the methods below. Each one computes the new
triple up front, writes it in a single atomic change and raises a domain
event. Persisting the matching StockMovement is the AllocationEngine's job.
"""

from datetime import UTC, datetime

import structlog
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from inventory.domain import inventory
from inventory.ledger.balance import AllocationResult, BalanceChange
from inventory.ledger.events import (
    InventoryAdjusted,
    InventoryRecordCreated,
    LowStockDetected,
    ReorderSettingsUpdated,
    StockAllocated,
    StockConsumed,
    StockReleased,
)
from inventory.movement.types import AdjustmentType, MovementType
from inventory.reorder.severity import classify
from inventory.settings import DEFAULT_WAREHOUSE

logger = structlog.get_logger(__name__)


def record_key_for(product_id, warehouse_location) -> str:
    """Unique key of a record: one row per product and warehouse location.

    The product id is length-prefixed so no two pairs share a key:

    >>> record_key_for("a@b", "c")
    '3:a@b@c'
    >>> record_key_for("a", "b@c")
    '1:a@b@c'
    """
    product_id = str(product_id)
    return f"{len(product_id)}:{product_id}@{warehouse_location}"


def _require_quantity(quantity, minimum=1):
    if quantity is None or quantity < minimum:
        raise ValidationError({"quantity": [f"Quantity must be at least {minimum}"]})


@inventory.aggregate
class InventoryRecord:
    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    record_key = String(required=True, max_length=255, unique=True)
    sku = String(max_length=50)
    product_name = String(max_length=255)
    quantity_on_hand = Integer(default=0, min_value=0)
    quantity_allocated = Integer(default=0, min_value=0)
    quantity_available = Integer(default=0, min_value=0)
    reorder_level = Integer(default=10, min_value=0)
    reorder_quantity = Integer(default=50, min_value=1)
    unit_cost = Float(default=0.0, min_value=0.0)
    selling_price = Float(default=0.0, min_value=0.0)
    last_movement_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def on_hand_equals_allocated_plus_available(self):
        if self.quantity_on_hand != self.quantity_allocated + self.quantity_available:
            raise ValidationError(
                {
                    "quantity_on_hand": [
                        f"On-hand ({self.quantity_on_hand}) must equal allocated "
                        f"({self.quantity_allocated}) plus available ({self.quantity_available})"
                    ]
                }
            )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(
        cls,
        product_id,
        warehouse_location=DEFAULT_WAREHOUSE,
        reorder_level=10,
        reorder_quantity=50,
        unit_cost=0.0,
        selling_price=0.0,
        sku=None,
        product_name=None,
    ):
        """Open a zero-balance record for a newly created product."""
        now = datetime.now(UTC)
        record = cls(
            product_id=product_id,
            warehouse_location=warehouse_location,
            record_key=record_key_for(product_id, warehouse_location),
            sku=sku,
            product_name=product_name,
            quantity_on_hand=0,
            quantity_allocated=0,
            quantity_available=0,
            reorder_level=reorder_level,
            reorder_quantity=reorder_quantity,
            unit_cost=unit_cost,
            selling_price=selling_price,
            created_at=now,
            updated_at=now,
        )
        record.raise_(
            InventoryRecordCreated(
                inventory_record_id=str(record.id),
                product_id=str(product_id),
                warehouse_location=warehouse_location,
                reorder_level=reorder_level,
                reorder_quantity=reorder_quantity,
                created_at=now,
            )
        )
        return record

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _write_balances(self, movement_type, quantity, on_hand, allocated, available, now):
        change = BalanceChange(
            product_id=str(self.product_id),
            warehouse_location=self.warehouse_location,
            movement_type=movement_type,
            quantity=quantity,
            previous_on_hand=self.quantity_on_hand,
            new_on_hand=on_hand,
            previous_allocated=self.quantity_allocated,
            new_allocated=allocated,
            previous_available=self.quantity_available,
            new_available=available,
        )
        with atomic_change(self):
            self.quantity_on_hand = on_hand
            self.quantity_allocated = allocated
            self.quantity_available = available
            self.updated_at = now
        return change

    def _check_low_stock(self, previous_available, now):
        """Raise LowStockDetected when available falls into (or deeper into) the reorder band."""
        if self.quantity_available >= previous_available:
            return
        severity = classify(self.quantity_available, self.reorder_level)
        if severity is None or severity == classify(previous_available, self.reorder_level):
            return
        self.raise_(
            LowStockDetected(
                inventory_record_id=str(self.id),
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                severity=severity.value,
                current_available=self.quantity_available,
                reorder_level=self.reorder_level,
                deficit=max(0, self.reorder_level - self.quantity_available),
                detected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Balance mutations
    # -------------------------------------------------------------------
    def adjust(self, adjustment_type, quantity, reason, adjusted_by=None) -> BalanceChange:
        """Increase, decrease or set on-hand stock.

        On-hand is never allowed to drop below what is already allocated:
        such an adjustment is rejected and the record is left untouched.
        """
        try:
            adjustment_type = AdjustmentType(adjustment_type)
        except ValueError:
            raise ValidationError({"adjustment_type": [f"Unknown adjustment type: {adjustment_type}"]}) from None
        _require_quantity(quantity, adjustment_type.minimum_quantity)
        if not reason:
            raise ValidationError({"reason": ["A reason is required for stock adjustments"]})

        new_on_hand = adjustment_type.apply(self.quantity_on_hand, quantity)
        if new_on_hand < self.quantity_allocated:
            raise ValidationError(
                {
                    "quantity": [
                        f"Cannot set on-hand to {new_on_hand}: "
                        f"{self.quantity_allocated} units are allocated"
                    ]
                }
            )

        now = datetime.now(UTC)
        previous_available = self.quantity_available
        change = self._write_balances(
            adjustment_type.movement_type,
            quantity,
            on_hand=new_on_hand,
            allocated=self.quantity_allocated,
            available=max(0, new_on_hand - self.quantity_allocated),
            now=now,
        )

        self.raise_(
            InventoryAdjusted(
                inventory_record_id=str(self.id),
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                adjustment_type=adjustment_type.value,
                quantity=quantity,
                previous_on_hand=change.previous_on_hand,
                new_on_hand=change.new_on_hand,
                new_available=change.new_available,
                reason=reason,
                adjusted_by=adjusted_by,
                adjusted_at=now,
            )
        )
        self._check_low_stock(previous_available, now)
        return change

    def allocate(self, quantity, reference_id=None) -> AllocationResult:
        """Move ``quantity`` units from available to allocated.

        A shortfall leaves the record untouched and comes back as an
        unsuccessful result carrying the available quantity.
        """
        _require_quantity(quantity)
        available = self.quantity_available
        if quantity > available:
            return AllocationResult(
                ok=False,
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                requested=quantity,
                available=available,
            )

        now = datetime.now(UTC)
        change = self._write_balances(
            MovementType.ALLOCATION,
            quantity,
            on_hand=self.quantity_on_hand,
            allocated=self.quantity_allocated + quantity,
            available=available - quantity,
            now=now,
        )

        self.raise_(
            StockAllocated(
                inventory_record_id=str(self.id),
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                quantity=quantity,
                reference_id=reference_id,
                previous_available=change.previous_available,
                new_available=change.new_available,
                new_allocated=change.new_allocated,
                allocated_at=now,
            )
        )
        self._check_low_stock(available, now)
        return AllocationResult(
            ok=True,
            product_id=str(self.product_id),
            warehouse_location=self.warehouse_location,
            requested=quantity,
            available=available,
            change=change,
        )

    def release(self, quantity, reference_id=None) -> BalanceChange:
        """Return allocated units to available, never beyond on-hand.

        Releasing more than is allocated releases everything that is. With
        nothing allocated there is nothing to release and the call is refused.
        """
        _require_quantity(quantity)
        if self.quantity_allocated == 0:
            raise ValidationError(
                {"quantity": [f"Cannot release {quantity} units: nothing is allocated"]}
            )
        if quantity > self.quantity_allocated:
            logger.warning(
                "Release exceeds allocated quantity",
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                requested=quantity,
                allocated=self.quantity_allocated,
                reference_id=reference_id,
            )

        now = datetime.now(UTC)
        change = self._write_balances(
            MovementType.RELEASE,
            quantity,
            on_hand=self.quantity_on_hand,
            allocated=max(0, self.quantity_allocated - quantity),
            available=min(self.quantity_on_hand, self.quantity_available + quantity),
            now=now,
        )

        self.raise_(
            StockReleased(
                inventory_record_id=str(self.id),
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                quantity=quantity,
                reference_id=reference_id,
                previous_available=change.previous_available,
                new_available=change.new_available,
                new_allocated=change.new_allocated,
                released_at=now,
            )
        )
        return change

    def consume(self, quantity, reference_id=None) -> BalanceChange:
        """Retire allocated units that have physically left the warehouse."""
        _require_quantity(quantity)
        if quantity > self.quantity_allocated:
            raise ValidationError(
                {
                    "quantity": [
                        f"Cannot consume {quantity} units: only {self.quantity_allocated} allocated"
                    ]
                }
            )

        now = datetime.now(UTC)
        change = self._write_balances(
            MovementType.CONSUMPTION,
            quantity,
            on_hand=self.quantity_on_hand - quantity,
            allocated=self.quantity_allocated - quantity,
            available=self.quantity_available,
            now=now,
        )

        self.raise_(
            StockConsumed(
                inventory_record_id=str(self.id),
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                quantity=quantity,
                reference_id=reference_id,
                previous_on_hand=change.previous_on_hand,
                new_on_hand=change.new_on_hand,
                new_allocated=change.new_allocated,
                consumed_at=now,
            )
        )
        return change

    # -------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------
    def update_reorder_settings(self, reorder_level, reorder_quantity):
        if reorder_level is None or reorder_level < 0:
            raise ValidationError({"reorder_level": ["Reorder level cannot be negative"]})
        if reorder_quantity is None or reorder_quantity < 1:
            raise ValidationError({"reorder_quantity": ["Reorder quantity must be at least 1"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.reorder_level = reorder_level
            self.reorder_quantity = reorder_quantity
            self.updated_at = now

        self.raise_(
            ReorderSettingsUpdated(
                inventory_record_id=str(self.id),
                product_id=str(self.product_id),
                warehouse_location=self.warehouse_location,
                reorder_level=reorder_level,
                reorder_quantity=reorder_quantity,
                updated_at=now,
            )
        )

    def touch_movement(self, moved_at):
        self.last_movement_at = moved_at
