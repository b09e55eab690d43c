"""Domain errors raised by the inventory context.

Input problems are reported with Protean's ``ValidationError`` and missing
records with ``ObjectNotFoundError``. The errors below cover the two cases
that are neither: a second record for an existing key, and an order that
cannot be fully allocated.
"""

from protean.exceptions import ProteanExceptionWithMessage


class DuplicateRecordError(ProteanExceptionWithMessage):
    """An inventory record already exists for the product and warehouse."""

    def __init__(self, product_id, warehouse_location):
        self.product_id = product_id
        self.warehouse_location = warehouse_location
        super().__init__(
            {
                "product_id": [
                    f"Inventory record already exists for product {product_id} at {warehouse_location}"
                ]
            }
        )


class InsufficientInventoryError(ProteanExceptionWithMessage):
    """A line item could not be allocated, so the whole order was refused."""

    def __init__(self, product_id, warehouse_location, requested, available):
        self.product_id = product_id
        self.warehouse_location = warehouse_location
        self.requested = requested
        self.available = available
        self.shortfall = requested - available
        super().__init__(
            {
                "items": [
                    f"Insufficient inventory for product {product_id}. "
                    f"Available: {available}, Requested: {requested}"
                ]
            }
        )
