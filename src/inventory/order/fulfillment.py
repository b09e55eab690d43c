"""Order fulfillment: placing, cancelling, shipping and moving orders through their lifecycle.

Each command runs in one unit of work covering the order, every inventory
record it touches and the stock movements documenting those changes.

- Placing an order allocates every line before anything is written. The
  first line that cannot be allocated refuses the whole order and names the
  product and its shortfall.
- Cancelling releases what has not shipped yet.
- Shipping (a single line, or the whole order via SHIPPED) consumes the
  allocated stock, so shipped units leave on-hand.
- Returning an order restocks everything that shipped.
"""

import json
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from inventory.allocation.engine import AllocationEngine
from inventory.domain import inventory
from inventory.exceptions import InsufficientInventoryError
from inventory.movement.types import AdjustmentType
from inventory.order.order import Order, OrderStatus, price_order
from inventory.settings import DEFAULT_WAREHOUSE, setting

logger = structlog.get_logger(__name__)


@inventory.command(part_of="Order")
class PlaceOrder:
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    customer_phone = String(max_length=50)
    items = Text(required=True)  # JSON: list of {product_id, warehouse_location, quantity, unit_price}
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    notes = Text()
    actor_id = String(max_length=255)


@inventory.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    actor_id = String(max_length=255)


@inventory.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    notes = Text()
    actor_id = String(max_length=255)


@inventory.command(part_of="Order")
class ShipOrderItem:
    order_id = Identifier(required=True)
    order_item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    actor_id = String(max_length=255)


def _load_json(value):
    return json.loads(value) if isinstance(value, str) else value


def _validate_items(items):
    if not items:
        raise ValidationError({"items": ["Order must contain at least one item"]})
    for item in items:
        if not item.get("product_id"):
            raise ValidationError({"items": ["Every item needs a product_id"]})
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": [f"Quantity for product {item['product_id']} must be at least 1"]})
        unit_price = item.get("unit_price")
        if not isinstance(unit_price, (int, float)) or unit_price <= 0:
            raise ValidationError({"items": [f"Unit price for product {item['product_id']} must be positive"]})


@inventory.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = _load_json(command.items)
        _validate_items(items)
        shipping_address = _load_json(command.shipping_address)
        billing_address = _load_json(command.billing_address) if command.billing_address else None

        pricing = price_order(
            items,
            tax_rate=setting("TAX_RATE"),
            free_shipping_threshold=setting("FREE_SHIPPING_THRESHOLD"),
            flat_shipping_fee=setting("FLAT_SHIPPING_FEE"),
        )

        orders = current_domain.repository_for(Order)
        order = Order.place(
            order_number=orders.next_order_number(datetime.now(UTC)),
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            customer_phone=command.customer_phone,
            items_data=items,
            shipping_address=shipping_address,
            billing_address=billing_address,
            pricing=pricing,
            notes=command.notes,
        )

        # Every line is allocated in memory first; nothing is written unless all succeed
        engine = AllocationEngine()
        for item in order.items:
            if engine.find(item.product_id, item.warehouse_location) is None:
                raise InsufficientInventoryError(item.product_id, item.warehouse_location, item.quantity, 0)
            result = engine.allocate(
                item.product_id,
                item.quantity,
                reference_id=str(order.id),
                actor_id=command.actor_id,
                warehouse_location=item.warehouse_location,
                reason=f"Allocated for order {order.order_number}",
            )
            if not result.ok:
                logger.warning(
                    "Order refused for insufficient inventory",
                    order_number=order.order_number,
                    product_id=item.product_id,
                    requested=result.requested,
                    available=result.available,
                )
                raise InsufficientInventoryError(
                    item.product_id, item.warehouse_location, result.requested, result.available
                )

        engine.commit()
        orders.add(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            items=len(order.items),
            total_amount=order.pricing.total_amount,
        )
        return str(order.id)

    @handle(CancelOrder)
    def cancel_order(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)
        self._cancel(order, command.reason, command.actor_id)

    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)
        target = OrderStatus(command.status)

        if target == OrderStatus.CANCELLED:
            self._cancel(order, command.notes or "Cancelled", command.actor_id)
            return

        remaining = [(item, item.quantity_remaining) for item in order.items]
        order.transition_to(target, notes=command.notes)

        engine = AllocationEngine()
        if target == OrderStatus.SHIPPED:
            for item, quantity in remaining:
                if quantity > 0:
                    engine.consume(
                        item.product_id,
                        quantity,
                        reference_id=str(order.id),
                        actor_id=command.actor_id,
                        warehouse_location=item.warehouse_location or DEFAULT_WAREHOUSE,
                        reason=f"Shipped with order {order.order_number}",
                    )
        elif target == OrderStatus.RETURNED:
            for item in order.items:
                if item.quantity_shipped:
                    engine.adjust(
                        item.product_id,
                        AdjustmentType.INCREASE,
                        item.quantity_shipped,
                        reason=f"Returned from order {order.order_number}",
                        actor_id=command.actor_id,
                        warehouse_location=item.warehouse_location or DEFAULT_WAREHOUSE,
                        reference_id=str(order.id),
                    )

        engine.commit()
        orders.add(order)
        logger.info(
            "Order status updated",
            order_id=str(order.id),
            order_number=order.order_number,
            status=target.value,
        )

    @handle(ShipOrderItem)
    def ship_order_item(self, command):
        orders = current_domain.repository_for(Order)
        order = orders.get(command.order_id)
        item = order.ship_item(
            command.order_item_id,
            command.quantity,
            tracking_number=command.tracking_number,
            carrier=command.carrier,
        )

        engine = AllocationEngine()
        engine.consume(
            item.product_id,
            command.quantity,
            reference_id=str(order.id),
            actor_id=command.actor_id,
            warehouse_location=item.warehouse_location or DEFAULT_WAREHOUSE,
            reason=f"Shipped with order {order.order_number}",
        )
        engine.commit()
        orders.add(order)
        logger.info(
            "Order item shipped",
            order_id=str(order.id),
            order_item_id=str(item.id),
            quantity=command.quantity,
            status=order.status,
        )

    def _cancel(self, order, reason, actor_id):
        order.cancel(reason, cancelled_by=actor_id)

        engine = AllocationEngine()
        for item in order.items:
            if item.quantity_remaining > 0:
                engine.release(
                    item.product_id,
                    item.quantity_remaining,
                    reference_id=str(order.id),
                    actor_id=actor_id,
                    warehouse_location=item.warehouse_location or DEFAULT_WAREHOUSE,
                    reason=f"Order {order.order_number} cancelled: {reason}",
                )

        engine.commit()
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            reason=reason,
        )
