"""MovementRecorder: appends ledger entries alongside the balance change they document."""

import structlog
from protean.utils.globals import current_domain

from inventory.movement.movement import StockMovement

logger = structlog.get_logger(__name__)


class MovementRecorder:
    """Stages movements and appends them within the caller's unit of work.

    Staging lets a batch of balance changes (an order with several lines)
    be discarded as a whole before anything reaches the repository.
    """

    def __init__(self):
        self._staged = []

    @property
    def staged(self) -> list[StockMovement]:
        return list(self._staged)

    def record(self, record, change, reason, reference_id=None, actor_id=None) -> StockMovement:
        movement = StockMovement.from_change(
            change,
            reason=reason,
            reference_id=reference_id,
            created_by=actor_id,
        )
        record.touch_movement(movement.created_at)
        self._staged.append(movement)
        return movement

    def flush(self) -> list[StockMovement]:
        repo = current_domain.repository_for(StockMovement)
        flushed, self._staged = self._staged, []
        for movement in flushed:
            repo.append(movement)
            logger.debug(
                "Stock movement recorded",
                movement_id=str(movement.id),
                product_id=str(movement.product_id),
                movement_type=movement.movement_type,
                quantity=movement.quantity,
                reference_id=movement.reference_id,
            )
        return flushed
