"""Domain events for the InventoryRecord aggregate.

Every balance mutation raises exactly one of these events carrying the
before/after snapshot, in addition to the StockMovement row that documents
the change in the ledger.
"""

from protean.fields import DateTime, Identifier, Integer, String

from inventory.domain import inventory


@inventory.event(part_of="InventoryRecord")
class InventoryRecordCreated:
    """A zero-balance inventory record was opened for a product at a warehouse."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    reorder_level = Integer(required=True)
    reorder_quantity = Integer(required=True)
    created_at = DateTime(required=True)


@inventory.event(part_of="InventoryRecord")
class InventoryAdjusted:
    """On-hand stock was increased, decreased or set to an absolute count."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    adjustment_type = String(required=True)
    quantity = Integer(required=True)
    previous_on_hand = Integer(required=True)
    new_on_hand = Integer(required=True)
    new_available = Integer(required=True)
    reason = String(required=True)
    adjusted_by = String()
    adjusted_at = DateTime(required=True)


@inventory.event(part_of="InventoryRecord")
class StockAllocated:
    """Available stock was allocated against a reference such as an order."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    quantity = Integer(required=True)
    reference_id = String()
    previous_available = Integer(required=True)
    new_available = Integer(required=True)
    new_allocated = Integer(required=True)
    allocated_at = DateTime(required=True)


@inventory.event(part_of="InventoryRecord")
class StockReleased:
    """Allocated stock was returned to available."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    quantity = Integer(required=True)
    reference_id = String()
    previous_available = Integer(required=True)
    new_available = Integer(required=True)
    new_allocated = Integer(required=True)
    released_at = DateTime(required=True)


@inventory.event(part_of="InventoryRecord")
class StockConsumed:
    """Allocated stock left the warehouse and was removed from on-hand."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    quantity = Integer(required=True)
    reference_id = String()
    previous_on_hand = Integer(required=True)
    new_on_hand = Integer(required=True)
    new_allocated = Integer(required=True)
    consumed_at = DateTime(required=True)


@inventory.event(part_of="InventoryRecord")
class ReorderSettingsUpdated:
    """Reorder level or reorder quantity was changed."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    reorder_level = Integer(required=True)
    reorder_quantity = Integer(required=True)
    updated_at = DateTime(required=True)


@inventory.event(part_of="InventoryRecord")
class LowStockDetected:
    """Available stock entered or worsened within the reorder band."""

    __version__ = 1

    inventory_record_id = Identifier(required=True)
    product_id = Identifier(required=True)
    warehouse_location = String(required=True)
    severity = String(required=True)
    current_available = Integer(required=True)
    reorder_level = Integer(required=True)
    deficit = Integer(required=True)
    detected_at = DateTime(required=True)
