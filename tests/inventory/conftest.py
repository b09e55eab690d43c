import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def inventory_bed():
    """Initialized inventory domain with its schema created for the whole session."""
    from inventory.domain import inventory

    bed = DomainFixture(inventory)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(inventory_bed):
    # Stores are reset when the context is popped
    with inventory_bed.domain_context():
        yield


@pytest.fixture()
def stock():
    """Open an inventory record and receive ``on_hand`` units into it.

    Extra keyword arguments go to the record (reorder settings, SKU, costs).
    Returns the id of the new record.
    """
    from inventory.allocation.commands import AdjustInventory
    from inventory.ledger.creation import CreateInventoryRecord
    from protean import current_domain

    def _stock(product_id, on_hand=0, warehouse_location="MAIN", **settings):
        record_id = current_domain.process(
            CreateInventoryRecord(product_id=product_id, warehouse_location=warehouse_location, **settings),
            asynchronous=False,
        )
        if on_hand:
            current_domain.process(
                AdjustInventory(
                    product_id=product_id,
                    warehouse_location=warehouse_location,
                    adjustment_type="INCREASE",
                    quantity=on_hand,
                    reason="Received",
                ),
                asynchronous=False,
            )
        return record_id

    return _stock
