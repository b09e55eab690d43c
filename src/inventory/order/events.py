"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from inventory.domain import inventory


@inventory.event(part_of="Order")
class OrderPlaced:
    """An order was accepted with every line item allocated."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_email = String(required=True)
    items = Text(required=True)  # JSON: list of {product_id, warehouse_location, quantity, unit_price}
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@inventory.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    notes = Text()
    changed_at = DateTime(required=True)


@inventory.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its unshipped quantities released."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    reason = String(required=True)
    cancelled_by = String()
    cancelled_at = DateTime(required=True)


@inventory.event(part_of="Order")
class OrderItemShipped:
    """Part or all of one line item left the warehouse."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    quantity_shipped = Integer(required=True)
    quantity_remaining = Integer(required=True)
    tracking_number = String()
    carrier = String()
    shipped_at = DateTime(required=True)
