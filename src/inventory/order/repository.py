"""Repository for the Order aggregate."""

from datetime import datetime

from inventory.domain import inventory
from inventory.order.order import Order
from inventory.pagination import iter_query


@inventory.repository(part_of=Order)
class OrderRepository:
    def count_for_day(self, day: datetime) -> int:
        return self._dao.query.filter(order_date=day.strftime("%Y%m%d")).all().total

    def next_order_number(self, day: datetime) -> str:
        """``ORD-YYYYMMDD-NNNN``, numbered by the orders already placed that day."""
        return f"ORD-{day.strftime('%Y%m%d')}-{self.count_for_day(day) + 1:04d}"

    def orders(self, **filters):
        """Orders matching ``filters``, newest first."""
        query = self._dao.query.filter(**filters) if filters else self._dao.query
        return query.order_by("-created_at")

    def count(self, **filters) -> int:
        return self.orders(**filters).limit(1).all().total

    def iter_orders(self, **filters):
        yield from iter_query(self.orders(**filters))
