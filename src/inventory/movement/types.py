"""Closed set of movement and adjustment kinds.

``MovementType`` is the ledger's tagged variant: each member knows which
balance column it documents and in which direction that column may move.
``AdjustmentType`` is the subset a caller may request through ``adjust``,
and each member carries its own on-hand transition.
"""

from enum import Enum


class MovementType(Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    SET = "SET"
    ALLOCATION = "ALLOCATION"
    RELEASE = "RELEASE"
    CONSUMPTION = "CONSUMPTION"

    @property
    def tracked_quantity(self) -> str:
        """The balance column whose before/after values the movement records."""
        if self in (MovementType.ALLOCATION, MovementType.RELEASE):
            return "available"
        return "on_hand"

    @property
    def direction(self) -> int:
        """+1 for movements that can only add, -1 for those that can only remove, 0 for SET."""
        if self in (MovementType.INCREASE, MovementType.RELEASE):
            return 1
        if self in (MovementType.DECREASE, MovementType.ALLOCATION, MovementType.CONSUMPTION):
            return -1
        return 0

    def delta(self, previous: int, new: int) -> int:
        """Signed ledger delta for a transition from ``previous`` to ``new``."""
        delta = new - previous
        if delta * self.direction < 0:
            raise ValueError(f"{self.value} movement cannot change quantity from {previous} to {new}")
        return delta


class AdjustmentType(Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    SET = "SET"

    @property
    def movement_type(self) -> MovementType:
        return MovementType(self.value)

    @property
    def minimum_quantity(self) -> int:
        # An absolute count of zero is a legitimate stock take
        return 0 if self is AdjustmentType.SET else 1

    def apply(self, on_hand: int, quantity: int) -> int:
        """New on-hand quantity after applying this adjustment."""
        if self is AdjustmentType.INCREASE:
            return on_hand + quantity
        if self is AdjustmentType.DECREASE:
            return max(0, on_hand - quantity)
        return quantity
