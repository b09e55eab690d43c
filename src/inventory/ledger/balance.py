"""Typed results returned by balance mutations."""

from dataclasses import dataclass

from inventory.movement.types import MovementType


@dataclass(frozen=True)
class BalanceChange:
    """Before/after snapshot of one InventoryRecord mutation."""

    product_id: str
    warehouse_location: str
    movement_type: MovementType
    quantity: int
    previous_on_hand: int
    new_on_hand: int
    previous_allocated: int
    new_allocated: int
    previous_available: int
    new_available: int

    @property
    def previous_quantity(self) -> int:
        if self.movement_type.tracked_quantity == "available":
            return self.previous_available
        return self.previous_on_hand

    @property
    def new_quantity(self) -> int:
        if self.movement_type.tracked_quantity == "available":
            return self.new_available
        return self.new_on_hand

    @property
    def delta(self) -> int:
        return self.movement_type.delta(self.previous_quantity, self.new_quantity)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "warehouse_location": self.warehouse_location,
            "movement_type": self.movement_type.value,
            "quantity": self.quantity,
            "previous_quantity": self.previous_quantity,
            "new_quantity": self.new_quantity,
            "before": {
                "on_hand": self.previous_on_hand,
                "allocated": self.previous_allocated,
                "available": self.previous_available,
            },
            "after": {
                "on_hand": self.new_on_hand,
                "allocated": self.new_allocated,
                "available": self.new_available,
            },
        }


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of an allocation attempt. A shortfall is a result, not an error."""

    ok: bool
    product_id: str
    warehouse_location: str
    requested: int
    available: int
    change: BalanceChange | None = None

    @property
    def shortfall(self) -> int:
        return 0 if self.ok else self.requested - self.available

    def to_dict(self) -> dict:
        return {
            "allocated": self.ok,
            "product_id": self.product_id,
            "warehouse_location": self.warehouse_location,
            "requested": self.requested,
            "available": self.available,
            "shortfall": self.shortfall,
            "change": self.change.to_dict() if self.change else None,
        }
