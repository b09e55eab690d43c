"""Integration tests for the inventory endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from inventory.allocation.engine import AllocationEngine
from inventory.api import inventory_router, register_error_handlers
from protean.exceptions import ExpectedVersionError


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(inventory_router)
    register_error_handlers(app)
    return TestClient(app)


def _create(client, product_id="prod-api-001", **overrides):
    payload = {"product_id": product_id, "sku": f"SKU-{product_id}", "product_name": "Enamel Mug"}
    payload.update(overrides)
    response = client.post("/inventory", json=payload)
    assert response.status_code == 201
    return response.json()["inventory_record_id"]


def _receive(client, product_id="prod-api-001", quantity=100, **overrides):
    payload = {"adjustment_type": "INCREASE", "quantity": quantity, "reason": "Received"}
    payload.update(overrides)
    response = client.post(f"/inventory/{product_id}/adjust", json=payload)
    assert response.status_code == 200
    return response.json()


class TestCreateRecordAPI:
    def test_create_returns_201(self, client):
        response = client.post("/inventory", json={"product_id": "prod-api-c1"})
        assert response.status_code == 201
        assert "inventory_record_id" in response.json()

    def test_duplicate_returns_409(self, client):
        _create(client)
        response = client.post("/inventory", json={"product_id": "prod-api-001"})
        assert response.status_code == 409
        assert "product_id" in response.json()["error"]

    def test_negative_reorder_level_returns_422(self, client):
        response = client.post("/inventory", json={"product_id": "prod-api-c2", "reorder_level": -1})
        assert response.status_code == 422


class TestGetRecordAPI:
    def test_get(self, client):
        _create(client)
        _receive(client, quantity=40)
        response = client.get("/inventory/prod-api-001")
        assert response.status_code == 200
        data = response.json()
        assert data["quantity_on_hand"] == 40
        assert data["quantity_available"] == 40
        assert data["warehouse_location"] == "MAIN"

    def test_missing_returns_404(self, client):
        response = client.get("/inventory/prod-nope")
        assert response.status_code == 404
        assert "product_id" in response.json()["error"]

    def test_other_warehouse(self, client):
        _create(client, warehouse_location="EAST")
        response = client.get("/inventory/prod-api-001", params={"warehouse_location": "EAST"})
        assert response.status_code == 200
        assert response.json()["warehouse_location"] == "EAST"


class TestBalanceMutationAPI:
    def test_adjust_returns_balance_change(self, client):
        _create(client)
        data = _receive(client, quantity=100)
        assert data["movement_type"] == "INCREASE"
        assert data["before"]["on_hand"] == 0
        assert data["after"] == {"on_hand": 100, "allocated": 0, "available": 100}

    def test_adjust_unknown_type_returns_400(self, client):
        _create(client)
        response = client.post(
            "/inventory/prod-api-001/adjust",
            json={"adjustment_type": "TRANSFER", "quantity": 1, "reason": "Moved"},
        )
        assert response.status_code == 400

    def test_adjust_below_allocated_returns_400(self, client):
        _create(client)
        _receive(client, quantity=50)
        client.post("/inventory/prod-api-001/allocate", json={"quantity": 20})
        response = client.post(
            "/inventory/prod-api-001/adjust",
            json={"adjustment_type": "DECREASE", "quantity": 40, "reason": "Shrinkage"},
        )
        assert response.status_code == 400
        assert "quantity" in response.json()["error"]

    def test_adjust_missing_reason_returns_422(self, client):
        _create(client)
        response = client.post("/inventory/prod-api-001/adjust", json={"adjustment_type": "INCREASE", "quantity": 5})
        assert response.status_code == 422

    def test_adjust_unknown_product_returns_404(self, client):
        response = client.post(
            "/inventory/prod-nope/adjust",
            json={"adjustment_type": "INCREASE", "quantity": 5, "reason": "Received"},
        )
        assert response.status_code == 404

    def test_allocate(self, client):
        _create(client)
        _receive(client)
        response = client.post("/inventory/prod-api-001/allocate", json={"quantity": 30, "reference_id": "ORD-1"})
        assert response.status_code == 200
        data = response.json()
        assert data["allocated"] is True
        assert data["change"]["after"]["available"] == 70

    def test_allocate_shortfall_is_reported_not_raised(self, client):
        _create(client)
        _receive(client, quantity=5)
        response = client.post("/inventory/prod-api-001/allocate", json={"quantity": 10})
        assert response.status_code == 200
        data = response.json()
        assert data["allocated"] is False
        assert data["shortfall"] == 5
        assert data["change"] is None

    def test_release_and_consume(self, client):
        _create(client)
        _receive(client)
        client.post("/inventory/prod-api-001/allocate", json={"quantity": 30})

        released = client.post("/inventory/prod-api-001/release", json={"quantity": 10})
        assert released.status_code == 200
        assert released.json()["after"]["allocated"] == 20

        consumed = client.post("/inventory/prod-api-001/consume", json={"quantity": 20})
        assert consumed.status_code == 200
        assert consumed.json()["after"] == {"on_hand": 80, "allocated": 0, "available": 80}

    def test_release_with_nothing_allocated_returns_400(self, client):
        _create(client)
        _receive(client)
        response = client.post("/inventory/prod-api-001/release", json={"quantity": 5})
        assert response.status_code == 400
        assert "quantity" in response.json()["error"]

    def test_concurrent_modification_returns_409(self, client, monkeypatch):
        _create(client)
        _receive(client)

        def stale_commit(self):
            raise ExpectedVersionError("Wrong expected version: 1 (Aggregate: InventoryRecord, Version: 2)")

        monkeypatch.setattr(AllocationEngine, "commit", stale_commit)
        response = client.post("/inventory/prod-api-001/allocate", json={"quantity": 5})
        assert response.status_code == 409
        assert "_entity" in response.json()["error"]
        monkeypatch.undo()
        assert client.get("/inventory/prod-api-001").json()["quantity_allocated"] == 0

    def test_consume_more_than_allocated_returns_400(self, client):
        _create(client)
        _receive(client)
        response = client.post("/inventory/prod-api-001/consume", json={"quantity": 1})
        assert response.status_code == 400

    def test_update_reorder_settings(self, client):
        _create(client)
        response = client.put(
            "/inventory/prod-api-001/reorder-settings",
            json={"reorder_level": 30, "reorder_quantity": 120},
        )
        assert response.status_code == 200
        assert client.get("/inventory/prod-api-001").json()["reorder_level"] == 30


class TestListingAPI:
    def test_list_with_pagination(self, client):
        for n in range(3):
            _create(client, product_id=f"prod-list-{n}")
        response = client.get("/inventory", params={"limit": 2})
        assert response.status_code == 200
        data = response.json()
        assert len(data["data"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}

    def test_limit_above_maximum_returns_422(self, client):
        response = client.get("/inventory", params={"limit": 1000})
        assert response.status_code == 422

    def test_search(self, client):
        _create(client, product_id="prod-s1", product_name="Cast Iron Pan")
        _create(client, product_id="prod-s2", product_name="Enamel Mug")
        response = client.get("/inventory/search", params={"q": "iron"})
        assert response.status_code == 200
        assert [r["product_id"] for r in response.json()] == ["prod-s1"]

    def test_statistics(self, client):
        _create(client, unit_cost=2.0, selling_price=5.0)
        _receive(client, quantity=10)
        response = client.get("/inventory/statistics")
        assert response.status_code == 200
        assert response.json()["valuation"]["potential_profit"] == 30.0

    def test_low_stock_and_out_of_stock(self, client):
        _create(client, product_id="prod-low")
        _receive(client, product_id="prod-low", quantity=3)
        _create(client, product_id="prod-empty")

        low = client.get("/inventory/low-stock").json()
        assert [a["product_id"] for a in low] == ["prod-empty", "prod-low"]
        assert low[1]["severity"] == "CRITICAL"

        empty = client.get("/inventory/out-of-stock").json()
        assert [a["product_id"] for a in empty] == ["prod-empty"]

        summary = client.get("/inventory/alerts/summary").json()
        assert summary["total"] == 2

    def test_movements(self, client):
        _create(client)
        _receive(client, quantity=10)
        client.post("/inventory/prod-api-001/allocate", json={"quantity": 4, "reference_id": "ORD-9"})
        response = client.get("/inventory/movements", params={"product_id": "prod-api-001"})
        assert response.status_code == 200
        data = response.json()
        assert [m["movement_type"] for m in data["data"]] == ["ALLOCATION", "INCREASE"]
        assert data["data"][0]["reference_id"] == "ORD-9"

    def test_movements_unknown_type_returns_400(self, client):
        response = client.get("/inventory/movements", params={"movement_type": "TRANSFER"})
        assert response.status_code == 400

    def test_check_availability(self, client):
        _create(client)
        _receive(client, quantity=10)
        response = client.post(
            "/inventory/check-availability",
            json={"items": [{"product_id": "prod-api-001", "quantity": 12}]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["all_available"] is False
        assert data["items"][0]["shortfall"] == 2

    def test_check_availability_requires_items(self, client):
        response = client.post("/inventory/check-availability", json={"items": []})
        assert response.status_code == 422


class TestAcrossWarehousesAPI:
    @pytest.fixture()
    def two_sites(self, client):
        _create(client)
        _receive(client, quantity=30)
        _create(client, warehouse_location="EAST")
        _receive(client, quantity=12, warehouse_location="EAST")

    def test_get_by_sku(self, client, two_sites):
        response = client.get("/inventory/sku/SKU-prod-api-001")
        assert response.status_code == 200
        assert response.json()["product_id"] == "prod-api-001"
        assert response.json()["quantity_on_hand"] == 30

    def test_unknown_sku_returns_404(self, client):
        response = client.get("/inventory/sku/SKU-nope")
        assert response.status_code == 404
        assert "sku" in response.json()["error"]

    def test_locations(self, client, two_sites):
        response = client.get("/inventory/prod-api-001/locations")
        assert response.status_code == 200
        assert [(r["warehouse_location"], r["quantity_on_hand"]) for r in response.json()] == [
            ("EAST", 12),
            ("MAIN", 30),
        ]

    def test_consolidated(self, client, two_sites):
        response = client.get("/inventory/prod-api-001/consolidated")
        assert response.status_code == 200
        data = response.json()
        assert data["warehouse_location"] == "ALL_WAREHOUSES"
        assert data["quantity_on_hand"] == 42
        assert data["quantity_available"] == 42
        assert data["locations"] == ["EAST", "MAIN"]

    def test_consolidated_unknown_product_returns_404(self, client):
        assert client.get("/inventory/prod-nope/consolidated").status_code == 404
        assert client.get("/inventory/prod-nope/locations").status_code == 404
