"""Read side of the ledger: balances, filtered listings, search and statistics."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from inventory.ledger.record import InventoryRecord
from inventory.pagination import Page, iter_query, paginate, paginate_items
from inventory.settings import DEFAULT_WAREHOUSE

ALL_WAREHOUSES = "ALL_WAREHOUSES"


def _repo():
    return current_domain.repository_for(InventoryRecord)


def get_by_product(product_id, warehouse_location=DEFAULT_WAREHOUSE) -> InventoryRecord:
    return _repo().get_by_product(product_id, warehouse_location)


def get_by_sku(sku, warehouse_location=DEFAULT_WAREHOUSE) -> InventoryRecord:
    record = _repo().records(sku=sku, warehouse_location=warehouse_location).limit(1).all().first
    if record is None:
        raise ObjectNotFoundError({"sku": [f"No inventory record for SKU {sku} at {warehouse_location}"]})
    return record


def locations_for_product(product_id) -> list[InventoryRecord]:
    """Every warehouse record of a product, ordered by warehouse location."""
    records = list(_repo().iter_records(product_id=str(product_id)))
    if not records:
        raise ObjectNotFoundError({"product_id": [f"No inventory records for product {product_id}"]})
    return records


def consolidated(product_id) -> dict:
    """One balance for a product summed across its warehouse locations.

    The product counts as low on stock when its total available is at or
    below the sum of its per-location reorder levels.
    """
    records = locations_for_product(product_id)
    on_hand = sum(r.quantity_on_hand for r in records)
    allocated = sum(r.quantity_allocated for r in records)
    reorder_level = sum(r.reorder_level for r in records)
    movements = [r.last_movement_at for r in records if r.last_movement_at]
    return {
        "product_id": str(product_id),
        "warehouse_location": ALL_WAREHOUSES,
        "sku": next((r.sku for r in records if r.sku), None),
        "product_name": next((r.product_name for r in records if r.product_name), None),
        "locations": [r.warehouse_location for r in records],
        "quantity_on_hand": on_hand,
        "quantity_allocated": allocated,
        "quantity_available": on_hand - allocated,
        "reorder_level": reorder_level,
        "is_low_stock": on_hand - allocated <= reorder_level,
        "last_movement_at": max(movements).isoformat() if movements else None,
    }


def list_records(
    warehouse_location=None,
    low_stock=False,
    out_of_stock=False,
    page=1,
    limit=None,
) -> Page:
    """List records, optionally restricted to low-stock or out-of-stock ones.

    Low stock means available is at or below the reorder level; out of
    stock means nothing is available.
    """
    query = _repo().in_warehouse(warehouse_location)
    if out_of_stock:
        query = query.filter(quantity_available=0)
    if not low_stock:
        return paginate(query, page, limit)

    # Reorder levels differ per record, so this comparison runs here
    records = [r for r in iter_query(query) if r.quantity_available <= r.reorder_level]
    return paginate_items(records, page, limit)


def search(term: str, limit=20) -> list[InventoryRecord]:
    """Case-insensitive substring match on SKU, product name and product id."""
    needle = (term or "").strip()
    if not needle:
        return []
    return list(_repo().matching(needle).limit(limit).all().items)


def statistics(warehouse_location=None) -> dict:
    """Totals across records, plus stock valuation at cost and at selling price."""
    query = _repo().in_warehouse(warehouse_location)
    records = list(iter_query(query))

    total_cost_value = sum(r.quantity_on_hand * (r.unit_cost or 0.0) for r in records)
    total_selling_value = sum(r.quantity_on_hand * (r.selling_price or 0.0) for r in records)

    return {
        "total_products": len(records),
        "total_on_hand": sum(r.quantity_on_hand for r in records),
        "total_allocated": sum(r.quantity_allocated for r in records),
        "total_available": sum(r.quantity_available for r in records),
        "out_of_stock_count": query.filter(quantity_available=0).limit(1).all().total,
        "low_stock_count": sum(1 for r in records if r.quantity_available <= r.reorder_level),
        "valuation": {
            "total_cost_value": round(total_cost_value, 2),
            "total_selling_value": round(total_selling_value, 2),
            "potential_profit": round(total_selling_value - total_cost_value, 2),
        },
    }


def record_to_dict(record: InventoryRecord) -> dict:
    return {
        "id": str(record.id),
        "product_id": str(record.product_id),
        "warehouse_location": record.warehouse_location,
        "sku": record.sku,
        "product_name": record.product_name,
        "quantity_on_hand": record.quantity_on_hand,
        "quantity_allocated": record.quantity_allocated,
        "quantity_available": record.quantity_available,
        "reorder_level": record.reorder_level,
        "reorder_quantity": record.reorder_quantity,
        "unit_cost": record.unit_cost,
        "selling_price": record.selling_price,
        "last_movement_at": record.last_movement_at.isoformat() if record.last_movement_at else None,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }
