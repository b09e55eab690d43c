"""Pydantic request/response schemas for the Inventory API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1)


class BalanceSchema(BaseModel):
    on_hand: int
    allocated: int
    available: int


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


# ---------------------------------------------------------------------------
# Inventory Request Schemas
# ---------------------------------------------------------------------------
class CreateInventoryRecordRequest(BaseModel):
    product_id: str = Field(min_length=1)
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)
    sku: str | None = Field(default=None, max_length=50)
    product_name: str | None = Field(default=None, max_length=255)
    reorder_level: int = Field(ge=0, default=10)
    reorder_quantity: int = Field(ge=1, default=50)
    unit_cost: float = Field(ge=0, default=0.0)
    selling_price: float = Field(ge=0, default=0.0)


class AdjustInventoryRequest(BaseModel):
    adjustment_type: str  # INCREASE, DECREASE or SET
    quantity: int = Field(ge=0)
    reason: str = Field(min_length=1, max_length=500)
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)
    actor_id: str | None = None


class AllocateInventoryRequest(BaseModel):
    quantity: int = Field(ge=1)
    reference_id: str | None = None
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)
    actor_id: str | None = None


class ReleaseInventoryRequest(BaseModel):
    quantity: int = Field(ge=1)
    reference_id: str | None = None
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)
    actor_id: str | None = None


class ConsumeInventoryRequest(BaseModel):
    quantity: int = Field(ge=1)
    reference_id: str | None = None
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)
    actor_id: str | None = None


class UpdateReorderSettingsRequest(BaseModel):
    reorder_level: int = Field(ge=0)
    reorder_quantity: int = Field(ge=1)
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)


class AvailabilityItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)


class CheckAvailabilityRequest(BaseModel):
    items: list[AvailabilityItemRequest] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Inventory Response Schemas
# ---------------------------------------------------------------------------
class InventoryRecordIdResponse(BaseModel):
    inventory_record_id: str


class InventoryRecordResponse(BaseModel):
    id: str
    product_id: str
    warehouse_location: str
    sku: str | None = None
    product_name: str | None = None
    quantity_on_hand: int
    quantity_allocated: int
    quantity_available: int
    reorder_level: int
    reorder_quantity: int
    unit_cost: float | None = None
    selling_price: float | None = None
    last_movement_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class InventoryRecordListResponse(BaseModel):
    data: list[InventoryRecordResponse]
    pagination: PaginationSchema


class ConsolidatedInventoryResponse(BaseModel):
    product_id: str
    warehouse_location: str
    sku: str | None = None
    product_name: str | None = None
    locations: list[str]
    quantity_on_hand: int
    quantity_allocated: int
    quantity_available: int
    reorder_level: int
    is_low_stock: bool
    last_movement_at: str | None = None


class BalanceChangeResponse(BaseModel):
    product_id: str
    warehouse_location: str
    movement_type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    before: BalanceSchema
    after: BalanceSchema


class AllocationResponse(BaseModel):
    allocated: bool
    product_id: str
    warehouse_location: str
    requested: int
    available: int
    shortfall: int
    change: BalanceChangeResponse | None = None


class MovementResponse(BaseModel):
    id: str
    product_id: str
    warehouse_location: str
    movement_type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: str
    reference_id: str | None = None
    created_by: str | None = None
    created_at: str | None = None


class MovementListResponse(BaseModel):
    data: list[MovementResponse]
    pagination: PaginationSchema


class ReorderAlertResponse(BaseModel):
    product_id: str
    warehouse_location: str
    sku: str | None = None
    product_name: str | None = None
    available: int
    reorder_level: int
    reorder_quantity: int
    severity: str
    deficit: int
    suggested_order_quantity: int


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    unit_price: float = Field(gt=0)
    warehouse_location: str = Field(default="MAIN", min_length=1, max_length=100)


class PlaceOrderRequest(BaseModel):
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    customer_phone: str | None = Field(default=None, max_length=50)
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    items: list[OrderItemRequest] = Field(min_length=1)
    notes: str | None = None
    actor_id: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)
    actor_id: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    notes: str | None = None
    actor_id: str | None = None


class ShipOrderItemRequest(BaseModel):
    quantity: int = Field(ge=1)
    tracking_number: str | None = None
    carrier: str | None = None
    actor_id: str | None = None


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str
    order_number: str


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    warehouse_location: str
    quantity: int
    unit_price: float
    total_price: float
    quantity_shipped: int
    quantity_remaining: int


class OrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    customer_name: str
    customer_email: str
    customer_phone: str | None = None
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    items: list[OrderItemResponse]
    subtotal: float
    tax_amount: float
    shipping_cost: float
    total_amount: float
    notes: str | None = None
    cancellation_reason: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    created_at: str | None = None
    shipped_at: str | None = None
    delivered_at: str | None = None


class OrderListResponse(BaseModel):
    data: list[OrderResponse]
    pagination: PaginationSchema
