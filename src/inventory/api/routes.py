"""FastAPI routes for the Inventory domain: stock balances, movements and orders."""

import json
from datetime import datetime

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from inventory.allocation.commands import (
    AdjustInventory,
    AllocateInventory,
    ConsumeInventory,
    ReleaseInventory,
)
from inventory.allocation.engine import check_availability
from inventory.api.schemas import (
    AdjustInventoryRequest,
    AllocateInventoryRequest,
    AllocationResponse,
    BalanceChangeResponse,
    CancelOrderRequest,
    CheckAvailabilityRequest,
    ConsolidatedInventoryResponse,
    ConsumeInventoryRequest,
    CreateInventoryRecordRequest,
    InventoryRecordIdResponse,
    InventoryRecordListResponse,
    InventoryRecordResponse,
    MovementListResponse,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    ReleaseInventoryRequest,
    ReorderAlertResponse,
    ShipOrderItemRequest,
    StatusResponse,
    UpdateOrderStatusRequest,
    UpdateReorderSettingsRequest,
)
from inventory.ledger import queries as ledger
from inventory.ledger.creation import CreateInventoryRecord, UpdateReorderSettings
from inventory.movement.history import history, movement_to_dict
from inventory.order import queries as orders
from inventory.order.fulfillment import CancelOrder, PlaceOrder, ShipOrderItem, UpdateOrderStatus
from inventory.reorder import monitor

# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.post("", status_code=201, response_model=InventoryRecordIdResponse)
async def create_inventory_record(body: CreateInventoryRecordRequest) -> InventoryRecordIdResponse:
    command = CreateInventoryRecord(
        product_id=body.product_id,
        warehouse_location=body.warehouse_location,
        sku=body.sku,
        product_name=body.product_name,
        reorder_level=body.reorder_level,
        reorder_quantity=body.reorder_quantity,
        unit_cost=body.unit_cost,
        selling_price=body.selling_price,
    )
    result = current_domain.process(command, asynchronous=False)
    return InventoryRecordIdResponse(inventory_record_id=result)


@inventory_router.get("", response_model=InventoryRecordListResponse)
async def list_inventory(
    warehouse_location: str | None = None,
    low_stock: bool = False,
    out_of_stock: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> InventoryRecordListResponse:
    result = ledger.list_records(
        warehouse_location=warehouse_location,
        low_stock=low_stock,
        out_of_stock=out_of_stock,
        page=page,
        limit=limit,
    )
    return InventoryRecordListResponse(**result.to_dict(ledger.record_to_dict))


@inventory_router.get("/search", response_model=list[InventoryRecordResponse])
async def search_inventory(
    q: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> list[InventoryRecordResponse]:
    return [InventoryRecordResponse(**ledger.record_to_dict(r)) for r in ledger.search(q, limit=limit)]


@inventory_router.get("/statistics")
async def inventory_statistics(warehouse_location: str | None = None) -> dict:
    return ledger.statistics(warehouse_location)


@inventory_router.get("/low-stock", response_model=list[ReorderAlertResponse])
async def low_stock(
    warehouse_location: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
) -> list[ReorderAlertResponse]:
    return [ReorderAlertResponse(**a.to_dict()) for a in monitor.low_stock(warehouse_location, limit=limit)]


@inventory_router.get("/out-of-stock", response_model=list[ReorderAlertResponse])
async def out_of_stock(warehouse_location: str | None = None) -> list[ReorderAlertResponse]:
    return [ReorderAlertResponse(**a.to_dict()) for a in monitor.out_of_stock(warehouse_location)]


@inventory_router.get("/alerts/summary")
async def alert_summary(warehouse_location: str | None = None) -> dict:
    return monitor.alert_summary(warehouse_location)


@inventory_router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    product_id: str | None = None,
    movement_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    reference_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> MovementListResponse:
    result = history(
        product_id=product_id,
        movement_type=movement_type,
        start_date=start_date,
        end_date=end_date,
        reference_id=reference_id,
        page=page,
        limit=limit,
    )
    return MovementListResponse(**result.to_dict(movement_to_dict))


@inventory_router.post("/check-availability")
async def check_inventory_availability(body: CheckAvailabilityRequest) -> dict:
    return check_availability([item.model_dump() for item in body.items])


@inventory_router.get("/sku/{sku}", response_model=InventoryRecordResponse)
async def get_inventory_by_sku(sku: str, warehouse_location: str = "MAIN") -> InventoryRecordResponse:
    return InventoryRecordResponse(**ledger.record_to_dict(ledger.get_by_sku(sku, warehouse_location)))


@inventory_router.get("/{product_id}", response_model=InventoryRecordResponse)
async def get_inventory(product_id: str, warehouse_location: str = "MAIN") -> InventoryRecordResponse:
    return InventoryRecordResponse(**ledger.record_to_dict(ledger.get_by_product(product_id, warehouse_location)))


@inventory_router.get("/{product_id}/locations", response_model=list[InventoryRecordResponse])
async def inventory_locations(product_id: str) -> list[InventoryRecordResponse]:
    return [InventoryRecordResponse(**ledger.record_to_dict(r)) for r in ledger.locations_for_product(product_id)]


@inventory_router.get("/{product_id}/consolidated", response_model=ConsolidatedInventoryResponse)
async def consolidated_inventory(product_id: str) -> ConsolidatedInventoryResponse:
    return ConsolidatedInventoryResponse(**ledger.consolidated(product_id))


@inventory_router.post("/{product_id}/adjust", response_model=BalanceChangeResponse)
async def adjust_inventory(product_id: str, body: AdjustInventoryRequest) -> BalanceChangeResponse:
    command = AdjustInventory(
        product_id=product_id,
        warehouse_location=body.warehouse_location,
        adjustment_type=body.adjustment_type,
        quantity=body.quantity,
        reason=body.reason,
        actor_id=body.actor_id,
    )
    change = current_domain.process(command, asynchronous=False)
    return BalanceChangeResponse(**change.to_dict())


@inventory_router.post("/{product_id}/allocate", response_model=AllocationResponse)
async def allocate_inventory(product_id: str, body: AllocateInventoryRequest) -> AllocationResponse:
    command = AllocateInventory(
        product_id=product_id,
        warehouse_location=body.warehouse_location,
        quantity=body.quantity,
        reference_id=body.reference_id,
        actor_id=body.actor_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return AllocationResponse(**result.to_dict())


@inventory_router.post("/{product_id}/release", response_model=BalanceChangeResponse)
async def release_inventory(product_id: str, body: ReleaseInventoryRequest) -> BalanceChangeResponse:
    command = ReleaseInventory(
        product_id=product_id,
        warehouse_location=body.warehouse_location,
        quantity=body.quantity,
        reference_id=body.reference_id,
        actor_id=body.actor_id,
    )
    change = current_domain.process(command, asynchronous=False)
    return BalanceChangeResponse(**change.to_dict())


@inventory_router.post("/{product_id}/consume", response_model=BalanceChangeResponse)
async def consume_inventory(product_id: str, body: ConsumeInventoryRequest) -> BalanceChangeResponse:
    command = ConsumeInventory(
        product_id=product_id,
        warehouse_location=body.warehouse_location,
        quantity=body.quantity,
        reference_id=body.reference_id,
        actor_id=body.actor_id,
    )
    change = current_domain.process(command, asynchronous=False)
    return BalanceChangeResponse(**change.to_dict())


@inventory_router.put("/{product_id}/reorder-settings", response_model=StatusResponse)
async def update_reorder_settings(product_id: str, body: UpdateReorderSettingsRequest) -> StatusResponse:
    command = UpdateReorderSettings(
        product_id=product_id,
        warehouse_location=body.warehouse_location,
        reorder_level=body.reorder_level,
        reorder_quantity=body.reorder_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    command = PlaceOrder(
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        notes=body.notes,
        actor_id=body.actor_id,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id, order_number=orders.get_order(order_id).order_number)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> OrderListResponse:
    result = orders.list_orders(status=status, page=page, limit=limit)
    return OrderListResponse(**result.to_dict(orders.order_to_dict))


@order_router.get("/statistics")
async def order_statistics() -> dict:
    return orders.order_statistics()


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse(**orders.order_to_dict(orders.get_order(order_id)))


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    command = CancelOrder(order_id=order_id, reason=body.reason, actor_id=body.actor_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        notes=body.notes,
        actor_id=body.actor_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/items/{order_item_id}/ship", response_model=StatusResponse)
async def ship_order_item(order_id: str, order_item_id: str, body: ShipOrderItemRequest) -> StatusResponse:
    command = ShipOrderItem(
        order_id=order_id,
        order_item_id=order_item_id,
        quantity=body.quantity,
        tracking_number=body.tracking_number,
        carrier=body.carrier,
        actor_id=body.actor_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
