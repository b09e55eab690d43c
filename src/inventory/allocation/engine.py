"""AllocationEngine: the balance state machine over InventoryRecord.

Each public operation loads the record for (product, warehouse location),
applies one transition on the aggregate and stages the StockMovement that
documents it. Nothing is written until ``commit()``, which adds the touched
records and the staged movements to their repositories. Command handlers
call ``commit()`` inside their unit of work, so a record update and its
ledger entry are persisted together or not at all.

An engine instance caches the records it has loaded. Several operations on
the same product within one instance (two order lines for the same product)
see each other's effects before anything is persisted.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from inventory.ledger.balance import AllocationResult, BalanceChange
from inventory.ledger.record import InventoryRecord, record_key_for
from inventory.movement.recorder import MovementRecorder
from inventory.settings import DEFAULT_WAREHOUSE

logger = structlog.get_logger(__name__)


def _reason(reason, action, reference_id):
    if reason:
        return reason
    return f"{action} for {reference_id}" if reference_id else action


class AllocationEngine:
    def __init__(self):
        self._records = {}
        self._dirty = set()
        self.recorder = MovementRecorder()

    # -------------------------------------------------------------------
    # Record access
    # -------------------------------------------------------------------
    def find(self, product_id, warehouse_location=DEFAULT_WAREHOUSE) -> InventoryRecord | None:
        key = record_key_for(product_id, warehouse_location)
        if key not in self._records:
            record = current_domain.repository_for(InventoryRecord).find_by_product(product_id, warehouse_location)
            if record is None:
                return None
            self._records[key] = record
        return self._records[key]

    def record_for(self, product_id, warehouse_location=DEFAULT_WAREHOUSE) -> InventoryRecord:
        record = self.find(product_id, warehouse_location)
        if record is None:
            raise ObjectNotFoundError(
                {"product_id": [f"No inventory record for product {product_id} at {warehouse_location}"]}
            )
        return record

    def _stage(self, record, change, reason, reference_id, actor_id):
        self._dirty.add(record.record_key)
        return self.recorder.record(record, change, reason, reference_id=reference_id, actor_id=actor_id)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def adjust(
        self,
        product_id,
        adjustment_type,
        quantity,
        reason,
        actor_id=None,
        warehouse_location=DEFAULT_WAREHOUSE,
        reference_id=None,
    ) -> BalanceChange:
        record = self.record_for(product_id, warehouse_location)
        change = record.adjust(adjustment_type, quantity, reason, adjusted_by=actor_id)
        self._stage(record, change, reason, reference_id, actor_id)
        logger.info(
            "Inventory adjusted",
            product_id=str(product_id),
            warehouse_location=warehouse_location,
            adjustment_type=change.movement_type.value,
            previous_on_hand=change.previous_on_hand,
            new_on_hand=change.new_on_hand,
            actor_id=actor_id,
        )
        return change

    def allocate(
        self,
        product_id,
        quantity,
        reference_id=None,
        actor_id=None,
        warehouse_location=DEFAULT_WAREHOUSE,
        reason=None,
    ) -> AllocationResult:
        record = self.record_for(product_id, warehouse_location)
        result = record.allocate(quantity, reference_id=reference_id)
        if not result.ok:
            logger.warning(
                "Allocation shortfall",
                product_id=str(product_id),
                warehouse_location=warehouse_location,
                requested=result.requested,
                available=result.available,
                shortfall=result.shortfall,
                reference_id=reference_id,
            )
            return result

        self._stage(
            record,
            result.change,
            _reason(reason, "Allocated", reference_id),
            reference_id,
            actor_id,
        )
        logger.info(
            "Inventory allocated",
            product_id=str(product_id),
            warehouse_location=warehouse_location,
            quantity=quantity,
            new_available=result.change.new_available,
            reference_id=reference_id,
        )
        return result

    def release(
        self,
        product_id,
        quantity,
        reference_id=None,
        actor_id=None,
        warehouse_location=DEFAULT_WAREHOUSE,
        reason=None,
    ) -> BalanceChange:
        record = self.record_for(product_id, warehouse_location)
        change = record.release(quantity, reference_id=reference_id)
        self._stage(
            record,
            change,
            _reason(reason, "Released", reference_id),
            reference_id,
            actor_id,
        )
        logger.info(
            "Inventory released",
            product_id=str(product_id),
            warehouse_location=warehouse_location,
            quantity=quantity,
            new_available=change.new_available,
            reference_id=reference_id,
        )
        return change

    def consume(
        self,
        product_id,
        quantity,
        reference_id=None,
        actor_id=None,
        warehouse_location=DEFAULT_WAREHOUSE,
        reason=None,
    ) -> BalanceChange:
        record = self.record_for(product_id, warehouse_location)
        change = record.consume(quantity, reference_id=reference_id)
        self._stage(
            record,
            change,
            _reason(reason, "Shipped", reference_id),
            reference_id,
            actor_id,
        )
        logger.info(
            "Inventory consumed",
            product_id=str(product_id),
            warehouse_location=warehouse_location,
            quantity=quantity,
            new_on_hand=change.new_on_hand,
            reference_id=reference_id,
        )
        return change

    # -------------------------------------------------------------------
    # Read-only pre-flight
    # -------------------------------------------------------------------
    def check_availability(self, items) -> dict:
        """Advisory availability of each requested line; nothing is reserved.

        ``items`` is a list of dicts with ``product_id``, ``quantity`` and an
        optional ``warehouse_location``. A product without a record counts as
        having nothing available.
        """
        if not items:
            raise ValidationError({"items": ["At least one item is required"]})

        lines = []
        for item in items:
            quantity = item.get("quantity")
            if quantity is None or quantity < 1:
                raise ValidationError({"quantity": ["Quantity must be at least 1"]})
            warehouse_location = item.get("warehouse_location") or DEFAULT_WAREHOUSE
            record = self.find(item["product_id"], warehouse_location)
            available = record.quantity_available if record else 0
            lines.append(
                {
                    "product_id": str(item["product_id"]),
                    "warehouse_location": warehouse_location,
                    "requested_quantity": quantity,
                    "available_quantity": available,
                    "is_available": available >= quantity,
                    "shortfall": max(0, quantity - available),
                }
            )

        available_items = sum(1 for line in lines if line["is_available"])
        return {
            "items": lines,
            "all_available": available_items == len(lines),
            "summary": {
                "total_items": len(lines),
                "available_items": available_items,
                "unavailable_items": len(lines) - available_items,
            },
        }

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------
    def commit(self):
        """Add every touched record and every staged movement to its repository."""
        repo = current_domain.repository_for(InventoryRecord)
        for key in sorted(self._dirty):
            repo.add(self._records[key])
        self._dirty.clear()
        return self.recorder.flush()


def check_availability(items) -> dict:
    return AllocationEngine().check_availability(items)
