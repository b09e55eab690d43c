"""Inventory record creation and reorder settings: commands and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from inventory.domain import inventory
from inventory.ledger.record import InventoryRecord
from inventory.settings import DEFAULT_WAREHOUSE

logger = structlog.get_logger(__name__)


@inventory.command(part_of="InventoryRecord")
class CreateInventoryRecord:
    """Open a zero-balance record when a product is created."""

    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    sku = String(max_length=50)
    product_name = String(max_length=255)
    reorder_level = Integer(min_value=0, default=10)
    reorder_quantity = Integer(min_value=1, default=50)
    unit_cost = Float(min_value=0.0, default=0.0)
    selling_price = Float(min_value=0.0, default=0.0)


@inventory.command(part_of="InventoryRecord")
class UpdateReorderSettings:
    product_id = Identifier(required=True)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    reorder_level = Integer(required=True, min_value=0)
    reorder_quantity = Integer(required=True, min_value=1)


@inventory.command_handler(part_of=InventoryRecord)
class InventoryRecordHandler:
    @handle(CreateInventoryRecord)
    def create_record(self, command):
        repo = current_domain.repository_for(InventoryRecord)
        repo.ensure_absent(command.product_id, command.warehouse_location)

        record = InventoryRecord.open(
            product_id=command.product_id,
            warehouse_location=command.warehouse_location,
            reorder_level=command.reorder_level,
            reorder_quantity=command.reorder_quantity,
            unit_cost=command.unit_cost,
            selling_price=command.selling_price,
            sku=command.sku,
            product_name=command.product_name,
        )
        repo.add(record)
        logger.info(
            "Inventory record created",
            product_id=str(command.product_id),
            warehouse_location=command.warehouse_location,
        )
        return str(record.id)

    @handle(UpdateReorderSettings)
    def update_reorder_settings(self, command):
        repo = current_domain.repository_for(InventoryRecord)
        record = repo.get_by_product(command.product_id, command.warehouse_location)
        record.update_reorder_settings(command.reorder_level, command.reorder_quantity)
        repo.add(record)
