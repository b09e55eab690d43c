"""Application tests for movement history queries."""

from datetime import UTC, datetime, timedelta

import pytest
from inventory.allocation.commands import AdjustInventory, AllocateInventory, ReleaseInventory
from inventory.ledger.creation import CreateInventoryRecord
from inventory.movement.history import history, movement_to_dict
from inventory.movement.movement import StockMovement
from inventory.movement.repository import StockMovementRepository
from protean import current_domain
from protean.exceptions import InvalidOperationError, ValidationError


def _create_record(product_id):
    current_domain.process(CreateInventoryRecord(product_id=product_id), asynchronous=False)


def _adjust(product_id, quantity, adjustment_type="INCREASE"):
    current_domain.process(
        AdjustInventory(product_id=product_id, adjustment_type=adjustment_type, quantity=quantity, reason="Counted"),
        asynchronous=False,
    )


@pytest.fixture()
def ledger():
    _create_record("prod-001")
    _create_record("prod-002")
    _adjust("prod-001", 100)
    _adjust("prod-002", 40)
    current_domain.process(
        AllocateInventory(product_id="prod-001", quantity=30, reference_id="ORD-1"),
        asynchronous=False,
    )
    current_domain.process(
        ReleaseInventory(product_id="prod-001", quantity=10, reference_id="ORD-1"),
        asynchronous=False,
    )


class TestHistory:
    def test_most_recent_first(self, ledger):
        page = history(product_id="prod-001")
        assert [m.movement_type for m in page.items] == ["RELEASE", "ALLOCATION", "INCREASE"]

    def test_filter_by_type(self, ledger):
        page = history(movement_type="INCREASE")
        assert page.total == 2
        assert {m.product_id for m in page.items} == {"prod-001", "prod-002"}

    def test_filter_by_reference(self, ledger):
        page = history(reference_id="ORD-1")
        assert page.total == 2

    def test_date_range(self, ledger):
        now = datetime.now(UTC)
        assert history(start_date=now - timedelta(minutes=5)).total == 4
        assert history(end_date=now - timedelta(minutes=5)).total == 0

    def test_naive_dates_are_read_as_utc(self, ledger):
        naive_past = datetime.now(UTC).replace(tzinfo=None) - timedelta(minutes=5)
        assert history(start_date=naive_past).total == 4

    def test_pagination(self, ledger):
        first = history(limit=3)
        second = history(page=2, limit=3)
        assert len(first.items) == 3
        assert len(second.items) == 1
        assert first.total_pages == 2

    def test_unknown_movement_type(self):
        with pytest.raises(ValidationError) as exc_info:
            history(movement_type="TRANSFER")
        assert "movement_type" in exc_info.value.messages

    def test_inverted_date_range(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            history(start_date=now, end_date=now - timedelta(days=1))

    def test_serialization(self, ledger):
        data = movement_to_dict(history(product_id="prod-002").items[0])
        assert data["movement_type"] == "INCREASE"
        assert data["quantity"] == 40
        assert data["previous_quantity"] == 0
        assert data["new_quantity"] == 40
        assert data["created_at"] is not None


class TestAppendOnly:
    def test_recorded_movement_cannot_be_written_again(self, ledger):
        repo = current_domain.repository_for(StockMovement)
        assert isinstance(repo, StockMovementRepository)
        movement = history(product_id="prod-002").items[0]
        with pytest.raises(InvalidOperationError):
            repo.append(movement)
