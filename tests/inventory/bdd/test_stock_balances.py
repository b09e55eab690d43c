"""BDD tests for stock balance transitions."""

from inventory.ledger.events import LowStockDetected
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/stock_balances.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("{quantity:d} units are received"), target_fixture="record")
def receive(record, quantity):
    record.adjust("INCREASE", quantity, "Received")
    return record


@when(parsers.cfparse('{quantity:d} units are allocated for "{reference_id}"'), target_fixture="record")
def allocate(record, quantity, reference_id):
    record.allocate(quantity, reference_id=reference_id)
    return record


@when(parsers.cfparse('{quantity:d} units are released for "{reference_id}"'), target_fixture="record")
def release(record, quantity, reference_id):
    record.release(quantity, reference_id=reference_id)
    return record


@when(parsers.cfparse("{quantity:d} units are requested for allocation"), target_fixture="allocation")
def request_allocation(record, quantity):
    return record.allocate(quantity)


@when(parsers.cfparse("on-hand is decreased by {quantity:d}"), target_fixture="record")
def decrease(record, quantity, error):
    try:
        record.adjust("DECREASE", quantity, "Shrinkage")
    except ValidationError as exc:
        error["exc"] = exc
    return record


@when(parsers.cfparse("{quantity:d} allocated units are consumed"), target_fixture="record")
def consume(record, quantity):
    record.consume(quantity, reference_id="ORD-BDD")
    return record


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the allocation fails with a shortfall of {shortfall:d}"))
def allocation_fails(allocation, shortfall):
    assert not allocation.ok
    assert allocation.shortfall == shortfall


@then(parsers.cfparse('a LowStockDetected event is raised with severity "{severity}"'))
def low_stock_raised(record, severity):
    events = [e for e in record._events if isinstance(e, LowStockDetected)]
    assert [e.severity for e in events] == [severity]
