"""Shared BDD fixtures and step definitions for the Inventory domain."""

import pytest
from inventory.ledger.events import LowStockDetected, StockAllocated, StockReleased
from inventory.ledger.record import InventoryRecord
from inventory.movement.types import AdjustmentType
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

_INVENTORY_EVENT_CLASSES = {
    "StockAllocated": StockAllocated,
    "StockReleased": StockReleased,
    "LowStockDetected": LowStockDetected,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("an inventory record with {on_hand:d} units on hand"), target_fixture="record")
def record_with_stock(on_hand):
    record = InventoryRecord.open(product_id="prod-bdd")
    if on_hand:
        record.adjust(AdjustmentType.INCREASE, on_hand, "Opening balance")
    record._events.clear()
    return record


@given(
    parsers.cfparse("an inventory record with {on_hand:d} units on hand and a reorder level of {level:d}"),
    target_fixture="record",
)
def record_with_reorder_level(on_hand, level):
    record = InventoryRecord.open(product_id="prod-bdd", reorder_level=level)
    record.adjust(AdjustmentType.INCREASE, on_hand, "Opening balance")
    record._events.clear()
    return record


@given(parsers.cfparse("{quantity:d} units are allocated"))
def units_allocated(record, quantity):
    assert record.allocate(quantity, reference_id="ORD-BDD").ok
    record._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(
    parsers.cfparse(
        "the balances are {on_hand:d} on hand, {allocated:d} allocated and {available:d} available"
    )
)
def balances_are(record, on_hand, allocated, available):
    assert (record.quantity_on_hand, record.quantity_allocated, record.quantity_available) == (
        on_hand,
        allocated,
        available,
    )


@then(parsers.cfparse("a {event_type} event is raised"))
def event_raised(record, event_type):
    event_cls = _INVENTORY_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in record._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in record._events]}"


@then("the adjustment fails with a validation error")
def adjustment_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
