"""Append-only repository for StockMovement."""

from protean.exceptions import InvalidOperationError

from inventory.domain import inventory
from inventory.movement.movement import StockMovement
from inventory.pagination import iter_query


@inventory.repository(part_of=StockMovement)
class StockMovementRepository:
    """Movements are written once and never updated or deleted."""

    def append(self, movement: StockMovement) -> StockMovement:
        if self._dao.query.filter(id=movement.id).all().total:
            raise InvalidOperationError(f"Stock movement {movement.id} is already recorded and cannot be changed")
        return self.add(movement)

    def movements(self, **filters):
        """Movements matching ``filters``, most recent first."""
        query = self._dao.query.filter(**filters) if filters else self._dao.query
        return query.order_by("-created_at")

    def iter_movements(self, **filters):
        yield from iter_query(self.movements(**filters))

    def for_reference(self, reference_id) -> list[StockMovement]:
        return list(self.iter_movements(reference_id=reference_id))
