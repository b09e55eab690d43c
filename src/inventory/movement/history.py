"""Movement history: filtered, paginated, most recent first."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from inventory.movement.movement import StockMovement
from inventory.movement.types import MovementType
from inventory.pagination import Page, paginate


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def history(
    product_id=None,
    movement_type=None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page=1,
    limit=None,
    reference_id=None,
) -> Page:
    filters = {}
    if product_id:
        filters["product_id"] = product_id
    if movement_type:
        try:
            filters["movement_type"] = MovementType(movement_type).value
        except ValueError:
            raise ValidationError({"movement_type": [f"Unknown movement type: {movement_type}"]}) from None
    if reference_id:
        filters["reference_id"] = reference_id

    start_date, end_date = _as_utc(start_date), _as_utc(end_date)
    if start_date and end_date and start_date > end_date:
        raise ValidationError({"start_date": ["Start date must not be after end date"]})

    query = current_domain.repository_for(StockMovement).movements(**filters)
    if start_date:
        query = query.filter(created_at__gte=start_date)
    if end_date:
        query = query.filter(created_at__lte=end_date)
    return paginate(query, page, limit)


def movement_to_dict(movement: StockMovement) -> dict:
    return {
        "id": str(movement.id),
        "product_id": str(movement.product_id),
        "warehouse_location": movement.warehouse_location,
        "movement_type": movement.movement_type,
        "quantity": movement.quantity,
        "previous_quantity": movement.previous_quantity,
        "new_quantity": movement.new_quantity,
        "reason": movement.reason,
        "reference_id": movement.reference_id,
        "created_by": movement.created_by,
        "created_at": movement.created_at.isoformat() if movement.created_at else None,
    }
