"""Application tests for balance reads, listings, search and statistics."""

import pytest
from inventory.allocation.commands import AllocateInventory
from inventory.allocation.engine import check_availability
from inventory.ledger import queries
from inventory.ledger.record import InventoryRecord
from inventory.pagination import iter_query
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


@pytest.fixture()
def catalogue(stock):
    stock("prod-001", 100, sku="MUG-BLU", product_name="Blue Mug", unit_cost=2.0, selling_price=5.0)
    stock("prod-002", 8, sku="MUG-RED", product_name="Red Mug", unit_cost=2.0, selling_price=5.0)
    stock("prod-003", 0, sku="PLT-WHT", product_name="White Plate", unit_cost=4.0, selling_price=10.0)
    stock("prod-001", 20, warehouse_location="EAST", unit_cost=2.0, selling_price=5.0)


class TestGetByProduct:
    def test_found(self, catalogue):
        record = queries.get_by_product("prod-001")
        assert record.quantity_on_hand == 100

    def test_warehouse_specific(self, catalogue):
        assert queries.get_by_product("prod-001", "EAST").quantity_on_hand == 20

    def test_missing(self):
        with pytest.raises(ObjectNotFoundError):
            queries.get_by_product("prod-missing")


class TestGetBySku:
    def test_found(self, catalogue):
        assert str(queries.get_by_sku("MUG-RED").product_id) == "prod-002"

    def test_is_exact(self, catalogue):
        with pytest.raises(ObjectNotFoundError) as exc_info:
            queries.get_by_sku("mug-red")
        assert "sku" in exc_info.value.args[0]

    def test_warehouse_specific(self, catalogue):
        with pytest.raises(ObjectNotFoundError):
            queries.get_by_sku("MUG-BLU", "EAST")


class TestLocationsForProduct:
    def test_every_warehouse_in_order(self, catalogue):
        records = queries.locations_for_product("prod-001")
        assert [(r.warehouse_location, r.quantity_on_hand) for r in records] == [("EAST", 20), ("MAIN", 100)]

    def test_unknown_product(self, catalogue):
        with pytest.raises(ObjectNotFoundError):
            queries.locations_for_product("prod-missing")


class TestConsolidated:
    def test_sums_across_warehouses(self, catalogue):
        current_domain.process(
            AllocateInventory(product_id="prod-001", warehouse_location="EAST", quantity=5),
            asynchronous=False,
        )
        total = queries.consolidated("prod-001")
        assert total["warehouse_location"] == queries.ALL_WAREHOUSES
        assert total["locations"] == ["EAST", "MAIN"]
        assert (total["quantity_on_hand"], total["quantity_allocated"], total["quantity_available"]) == (120, 5, 115)
        assert total["reorder_level"] == 20
        assert total["is_low_stock"] is False
        assert total["sku"] == "MUG-BLU"
        assert total["last_movement_at"] is not None

    def test_low_against_summed_reorder_levels(self, stock):
        stock("prod-010", 6, reorder_level=5)
        stock("prod-010", 3, warehouse_location="EAST", reorder_level=5)
        assert queries.consolidated("prod-010")["is_low_stock"] is True

    def test_creates_nothing_for_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            queries.consolidated("prod-missing")
        assert current_domain.repository_for(InventoryRecord)._dao.query.all().total == 0


class TestListRecords:
    def test_all(self, catalogue):
        page = queries.list_records()
        assert page.total == 4
        assert [str(r.product_id) for r in page.items][:2] == ["prod-001", "prod-001"]

    def test_by_warehouse(self, catalogue):
        assert queries.list_records(warehouse_location="EAST").total == 1

    def test_low_stock(self, catalogue):
        page = queries.list_records(low_stock=True)
        assert {str(r.product_id) for r in page.items} == {"prod-002", "prod-003"}

    def test_out_of_stock(self, catalogue):
        page = queries.list_records(out_of_stock=True)
        assert [str(r.product_id) for r in page.items] == ["prod-003"]

    def test_invalid_limit(self):
        with pytest.raises(ValidationError):
            queries.list_records(limit=500)

    def test_pages_are_cut_by_the_store(self, catalogue):
        page = queries.list_records(page=2, limit=3)
        assert [(str(r.product_id), r.warehouse_location) for r in page.items] == [("prod-003", "MAIN")]
        assert page.total == 4
        assert page.total_pages == 2

    def test_low_stock_pages(self, catalogue):
        page = queries.list_records(low_stock=True, limit=1)
        assert len(page.items) == 1
        assert page.total == 2


class TestSearch:
    def test_matches_name_case_insensitively(self, catalogue):
        assert {str(r.product_id) for r in queries.search("mug")} == {"prod-001", "prod-002"}

    def test_matches_sku(self, catalogue):
        assert [r.sku for r in queries.search("plt")] == ["PLT-WHT"]

    def test_blank_term(self, catalogue):
        assert queries.search("  ") == []

    def test_limit(self, catalogue):
        assert len(queries.search("prod", limit=2)) == 2


class TestStatistics:
    def test_totals_and_valuation(self, catalogue):
        current_domain.process(AllocateInventory(product_id="prod-001", quantity=10), asynchronous=False)
        stats = queries.statistics()
        assert stats["total_products"] == 4
        assert stats["total_on_hand"] == 128
        assert stats["total_allocated"] == 10
        assert stats["total_available"] == 118
        assert stats["out_of_stock_count"] == 1
        assert stats["low_stock_count"] == 2
        assert stats["valuation"] == {
            "total_cost_value": 256.0,
            "total_selling_value": 640.0,
            "potential_profit": 384.0,
        }

    def test_per_warehouse(self, catalogue):
        stats = queries.statistics("EAST")
        assert stats["total_products"] == 1
        assert stats["total_on_hand"] == 20


class TestCheckAvailability:
    def test_mixed_availability(self, catalogue):
        result = check_availability(
            [
                {"product_id": "prod-001", "quantity": 50},
                {"product_id": "prod-002", "quantity": 10},
                {"product_id": "prod-ghost", "quantity": 1},
            ]
        )
        assert result["all_available"] is False
        assert result["summary"] == {"total_items": 3, "available_items": 1, "unavailable_items": 2}
        lines = {line["product_id"]: line for line in result["items"]}
        assert lines["prod-002"]["shortfall"] == 2
        assert lines["prod-ghost"]["available_quantity"] == 0

    def test_reserves_nothing(self, catalogue):
        check_availability([{"product_id": "prod-001", "quantity": 50}])
        assert queries.get_by_product("prod-001").quantity_allocated == 0

    def test_requires_items(self):
        with pytest.raises(ValidationError):
            check_availability([])

    def test_rejects_non_positive_quantity(self, catalogue):
        with pytest.raises(ValidationError):
            check_availability([{"product_id": "prod-001", "quantity": 0}])


def test_iter_query_walks_every_batch(catalogue):
    query = current_domain.repository_for(InventoryRecord).records()
    records = list(iter_query(query, batch_size=1))
    assert [(str(r.product_id), r.warehouse_location) for r in records] == [
        ("prod-001", "EAST"),
        ("prod-001", "MAIN"),
        ("prod-002", "MAIN"),
        ("prod-003", "MAIN"),
    ]
