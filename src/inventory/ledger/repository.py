"""Repository and read helpers for InventoryRecord."""

from protean import Q
from protean.exceptions import ObjectNotFoundError

from inventory.domain import inventory
from inventory.exceptions import DuplicateRecordError
from inventory.ledger.record import InventoryRecord
from inventory.pagination import iter_query
from inventory.settings import DEFAULT_WAREHOUSE

_ORDERING = ["product_id", "warehouse_location"]


@inventory.repository(part_of=InventoryRecord)
class InventoryRecordRepository:
    """Records are addressed by (product, warehouse location) rather than by id."""

    def find_by_product(self, product_id, warehouse_location=DEFAULT_WAREHOUSE) -> InventoryRecord | None:
        return (
            self._dao.query.filter(product_id=str(product_id), warehouse_location=warehouse_location).all().first
        )

    def get_by_product(self, product_id, warehouse_location=DEFAULT_WAREHOUSE) -> InventoryRecord:
        record = self.find_by_product(product_id, warehouse_location)
        if record is None:
            raise ObjectNotFoundError(
                {"product_id": [f"No inventory record for product {product_id} at {warehouse_location}"]}
            )
        return record

    def ensure_absent(self, product_id, warehouse_location=DEFAULT_WAREHOUSE) -> None:
        if self.find_by_product(product_id, warehouse_location) is not None:
            raise DuplicateRecordError(product_id, warehouse_location)

    def records(self, **filters):
        """Records matching ``filters``, ordered by product then warehouse location."""
        query = self._dao.query.filter(**filters) if filters else self._dao.query
        return query.order_by(_ORDERING)

    def in_warehouse(self, warehouse_location=None):
        return self.records(warehouse_location=warehouse_location) if warehouse_location else self.records()

    def matching(self, term: str):
        """Records whose SKU, product name or product id contains ``term``, ignoring case."""
        criteria = Q(sku__icontains=term) | Q(product_name__icontains=term) | Q(product_id__icontains=term)
        return self._dao.query.filter(criteria).order_by(_ORDERING)

    def iter_records(self, **filters):
        yield from iter_query(self.records(**filters))

