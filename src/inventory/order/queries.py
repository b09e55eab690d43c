"""Read side of orders: lookup, listing and statistics."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from inventory.order.order import Order, OrderStatus
from inventory.pagination import Page, paginate


def get_order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


def list_orders(status=None, page=1, limit=None) -> Page:
    filters = {}
    if status:
        try:
            filters["status"] = OrderStatus(status).value
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None

    return paginate(current_domain.repository_for(Order).orders(**filters), page, limit)


def order_statistics() -> dict:
    """Order counts per status and revenue; cancelled orders bring no revenue."""
    repo = current_domain.repository_for(Order)
    by_status = {status.value.lower(): repo.count(status=status.value) for status in OrderStatus}

    billed_statuses = [s.value for s in OrderStatus if s is not OrderStatus.CANCELLED]
    billable = [o.pricing.total_amount for o in repo.iter_orders(status__in=billed_statuses)]
    revenue_total = round(sum(billable), 2)
    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "revenue": {
            "total": revenue_total,
            "average": round(revenue_total / len(billable), 2) if billable else 0.0,
        },
    }


def order_to_dict(order: Order) -> dict:
    pricing = order.pricing
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "shipping_address": order.shipping_address.to_dict() if order.shipping_address else None,
        "billing_address": order.billing_address.to_dict() if order.billing_address else None,
        "items": [
            {
                "id": str(item.id),
                "product_id": item.product_id,
                "warehouse_location": item.warehouse_location,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
                "quantity_shipped": item.quantity_shipped or 0,
                "quantity_remaining": item.quantity_remaining,
            }
            for item in order.items
        ],
        "subtotal": pricing.subtotal if pricing else 0.0,
        "tax_amount": pricing.tax_amount if pricing else 0.0,
        "shipping_cost": pricing.shipping_cost if pricing else 0.0,
        "total_amount": pricing.total_amount if pricing else 0.0,
        "notes": order.notes,
        "cancellation_reason": order.cancellation_reason,
        "tracking_number": order.tracking_number,
        "carrier": order.carrier,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "shipped_at": order.shipped_at.isoformat() if order.shipped_at else None,
        "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
    }
