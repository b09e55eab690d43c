"""Stock adjustment, allocation, release and consumption: commands and handler.

Each handler runs one AllocationEngine operation and commits it within the
handler's unit of work. The return value carries before/after balances so
callers can reconcile their view of the record.
"""

from protean import handle
from protean.fields import Identifier, Integer, String

from inventory.allocation.engine import AllocationEngine
from inventory.domain import inventory
from inventory.ledger.record import InventoryRecord
from inventory.movement.types import AdjustmentType
from inventory.settings import DEFAULT_WAREHOUSE


@inventory.command(part_of="InventoryRecord")
class AdjustInventory:
    """Increase, decrease or set on-hand stock for a product."""

    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    adjustment_type = String(required=True, choices=AdjustmentType)
    quantity = Integer(required=True, min_value=0)
    reason = String(required=True, max_length=500)
    actor_id = String(max_length=255)
    reference_id = String(max_length=255)


@inventory.command(part_of="InventoryRecord")
class AllocateInventory:
    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    quantity = Integer(required=True, min_value=1)
    reference_id = String(max_length=255)
    actor_id = String(max_length=255)


@inventory.command(part_of="InventoryRecord")
class ReleaseInventory:
    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    quantity = Integer(required=True, min_value=1)
    reference_id = String(max_length=255)
    actor_id = String(max_length=255)


@inventory.command(part_of="InventoryRecord")
class ConsumeInventory:
    """Retire allocated stock that has shipped."""

    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    quantity = Integer(required=True, min_value=1)
    reference_id = String(max_length=255)
    actor_id = String(max_length=255)


@inventory.command_handler(part_of=InventoryRecord)
class AllocationHandler:
    @handle(AdjustInventory)
    def adjust_inventory(self, command):
        engine = AllocationEngine()
        change = engine.adjust(
            command.product_id,
            command.adjustment_type,
            command.quantity,
            command.reason,
            actor_id=command.actor_id,
            warehouse_location=command.warehouse_location,
            reference_id=command.reference_id,
        )
        engine.commit()
        return change

    @handle(AllocateInventory)
    def allocate_inventory(self, command):
        engine = AllocationEngine()
        result = engine.allocate(
            command.product_id,
            command.quantity,
            reference_id=command.reference_id,
            actor_id=command.actor_id,
            warehouse_location=command.warehouse_location,
        )
        if result.ok:
            engine.commit()
        return result

    @handle(ReleaseInventory)
    def release_inventory(self, command):
        engine = AllocationEngine()
        change = engine.release(
            command.product_id,
            command.quantity,
            reference_id=command.reference_id,
            actor_id=command.actor_id,
            warehouse_location=command.warehouse_location,
        )
        engine.commit()
        return change

    @handle(ConsumeInventory)
    def consume_inventory(self, command):
        engine = AllocationEngine()
        change = engine.consume(
            command.product_id,
            command.quantity,
            reference_id=command.reference_id,
            actor_id=command.actor_id,
            warehouse_location=command.warehouse_location,
        )
        engine.commit()
        return change
