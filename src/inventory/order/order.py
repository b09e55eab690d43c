"""Order aggregate (CQRS): customer orders whose line items hold inventory allocations.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED from PENDING, CONFIRMED or PROCESSING
    RETURNED from SHIPPED or DELIVERED

The aggregate only tracks order state. Allocating, releasing, consuming and
restocking inventory for those transitions is the coordinator's job
(see ``inventory.order.fulfillment``).
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Integer,
    String,
    Text,
    ValueObject,
)

from inventory.domain import inventory
from inventory.order.events import (
    OrderCancelled,
    OrderItemShipped,
    OrderPlaced,
    OrderStatusChanged,
)
from inventory.settings import DEFAULT_WAREHOUSE


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.RETURNED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

# States in which individual line items may ship
_SHIPPABLE_STATES = {OrderStatus.CONFIRMED, OrderStatus.PROCESSING}


def price_order(items, tax_rate=0.10, free_shipping_threshold=100.0, flat_shipping_fee=10.0) -> dict:
    """Subtotal, tax, shipping and total for a list of ``{quantity, unit_price}`` lines.

    Shipping is waived when the subtotal exceeds the free-shipping threshold.
    """
    subtotal = round(sum(item["quantity"] * item["unit_price"] for item in items), 2)
    tax_amount = round(subtotal * tax_rate, 2)
    shipping_cost = 0.0 if subtotal > free_shipping_threshold else flat_shipping_fee
    return {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "shipping_cost": shipping_cost,
        "total_amount": round(subtotal + tax_amount + shipping_cost, 2),
    }


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@inventory.value_object(part_of="Order")
class Address:
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@inventory.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked when the order is placed."""

    subtotal = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@inventory.entity(part_of="Order")
class OrderItem:
    """One product line; its quantity stays allocated until it ships or is released."""

    product_id = String(required=True, max_length=255)
    warehouse_location = String(max_length=100, default=DEFAULT_WAREHOUSE)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    quantity_shipped = Integer(default=0, min_value=0)

    @property
    def quantity_remaining(self) -> int:
        return self.quantity - (self.quantity_shipped or 0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@inventory.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    order_date = String(required=True, max_length=8)  # YYYYMMDD, for the daily sequence
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    customer_phone = String(max_length=50)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    pricing = ValueObject(OrderPricing)
    notes = Text()
    cancellation_reason = String(max_length=500)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    created_at = DateTime()
    updated_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()

    @invariant.post
    def shipped_quantity_cannot_exceed_ordered(self):
        for item in self.items or []:
            if (item.quantity_shipped or 0) > item.quantity:
                raise ValidationError(
                    {"items": [f"Item {item.product_id} shipped {item.quantity_shipped} of {item.quantity}"]}
                )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_name,
        customer_email,
        items_data,
        shipping_address,
        pricing,
        billing_address=None,
        customer_phone=None,
        notes=None,
    ):
        """Build a PENDING order. Billing defaults to the shipping address.

        Args:
            items_data: List of dicts with product_id, warehouse_location,
                        quantity, unit_price.
            shipping_address: Dict with street, city, state, zip_code, country.
            pricing: Dict as returned by ``price_order``.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(item["product_id"]),
                warehouse_location=item.get("warehouse_location") or DEFAULT_WAREHOUSE,
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                total_price=round(item["quantity"] * item["unit_price"], 2),
            )
            for item in items_data
        ]

        order = cls(
            order_number=order_number,
            order_date=now.strftime("%Y%m%d"),
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            shipping_address=Address(**shipping_address),
            billing_address=Address(**(billing_address or shipping_address)),
            items=items,
            status=OrderStatus.PENDING.value,
            pricing=OrderPricing(**pricing),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_email=customer_email,
                items=json.dumps(
                    [
                        {
                            "product_id": i.product_id,
                            "warehouse_location": i.warehouse_location,
                            "quantity": i.quantity,
                            "unit_price": i.unit_price,
                        }
                        for i in items
                    ]
                ),
                total_amount=order.pricing.total_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def can_transition_to(self, target_status) -> bool:
        return OrderStatus(target_status) in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def item(self, order_item_id) -> OrderItem:
        item = next((i for i in self.items if str(i.id) == str(order_item_id)), None)
        if item is None:
            raise ValidationError({"order_item_id": ["Item not found in order"]})
        return item

    @property
    def is_fully_shipped(self) -> bool:
        return all(item.quantity_remaining == 0 for item in self.items)

    def transition_to(self, target_status, notes=None):
        """Move to ``target_status`` (anything but CANCELLED, which goes through ``cancel``)."""
        target_status = OrderStatus(target_status)
        if target_status == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Use cancel to cancel an order"]})
        self._assert_can_transition(target_status)

        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target_status.value
            if notes:
                self.notes = notes
            if target_status == OrderStatus.SHIPPED:
                for item in self.items:
                    item.quantity_shipped = item.quantity
                self.shipped_at = now
            elif target_status == OrderStatus.DELIVERED:
                self.delivered_at = now
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target_status.value,
                notes=notes,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason, cancelled_by=None):
        if not reason:
            raise ValidationError({"reason": ["A cancellation reason is required"]})
        self._assert_can_transition(OrderStatus.CANCELLED)

        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.cancellation_reason = reason
            self.notes = reason
            self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Partial fulfillment
    # -------------------------------------------------------------------
    def ship_item(self, order_item_id, quantity, tracking_number=None, carrier=None):
        """Record a shipment of part of one line item.

        A CONFIRMED order moves to PROCESSING on its first shipment, and to
        SHIPPED once nothing remains on any line.
        """
        if OrderStatus(self.status) not in _SHIPPABLE_STATES:
            raise ValidationError({"status": [f"Cannot ship items of an order in {self.status} state"]})

        item = self.item(order_item_id)
        if quantity < 1 or quantity > item.quantity_remaining:
            raise ValidationError(
                {"quantity": [f"Can ship between 1 and {item.quantity_remaining} units of this item"]}
            )

        now = datetime.now(UTC)
        item.quantity_shipped = (item.quantity_shipped or 0) + quantity
        with atomic_change(self):
            if tracking_number:
                self.tracking_number = tracking_number
            if carrier:
                self.carrier = carrier
            self.updated_at = now

        self.raise_(
            OrderItemShipped(
                order_id=str(self.id),
                order_item_id=str(item.id),
                product_id=item.product_id,
                quantity=quantity,
                quantity_shipped=item.quantity_shipped,
                quantity_remaining=item.quantity_remaining,
                tracking_number=tracking_number,
                carrier=carrier,
                shipped_at=now,
            )
        )

        if OrderStatus(self.status) == OrderStatus.CONFIRMED:
            self.transition_to(OrderStatus.PROCESSING)
        if self.is_fully_shipped:
            self.transition_to(OrderStatus.SHIPPED)
        return item
