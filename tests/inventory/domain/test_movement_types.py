"""Movement and adjustment types: tracked balance, delta signs, on-hand transitions."""

import pytest
from inventory.movement.types import AdjustmentType, MovementType


class TestMovementType:
    @pytest.mark.parametrize(
        "movement_type",
        [MovementType.ALLOCATION, MovementType.RELEASE],
    )
    def test_allocation_and_release_track_available(self, movement_type):
        assert movement_type.tracked_quantity == "available"

    @pytest.mark.parametrize(
        "movement_type",
        [MovementType.INCREASE, MovementType.DECREASE, MovementType.SET, MovementType.CONSUMPTION],
    )
    def test_other_movements_track_on_hand(self, movement_type):
        assert movement_type.tracked_quantity == "on_hand"

    def test_increase_delta_is_positive(self):
        assert MovementType.INCREASE.delta(10, 25) == 15

    def test_allocation_delta_is_negative(self):
        assert MovementType.ALLOCATION.delta(10, 7) == -3

    def test_set_delta_can_go_either_way(self):
        assert MovementType.SET.delta(10, 4) == -6
        assert MovementType.SET.delta(4, 10) == 6
        assert MovementType.SET.delta(4, 4) == 0

    def test_delta_against_direction_is_rejected(self):
        with pytest.raises(ValueError):
            MovementType.RELEASE.delta(10, 5)
        with pytest.raises(ValueError):
            MovementType.CONSUMPTION.delta(5, 10)

    def test_unknown_value_is_rejected(self):
        with pytest.raises(ValueError):
            MovementType("TRANSFER")


class TestAdjustmentType:
    def test_increase_adds_quantity(self):
        assert AdjustmentType.INCREASE.apply(10, 5) == 15

    def test_decrease_subtracts_quantity(self):
        assert AdjustmentType.DECREASE.apply(10, 4) == 6

    def test_decrease_floors_at_zero(self):
        assert AdjustmentType.DECREASE.apply(3, 10) == 0

    def test_set_replaces_quantity(self):
        assert AdjustmentType.SET.apply(10, 42) == 42

    def test_only_set_accepts_zero(self):
        assert AdjustmentType.SET.minimum_quantity == 0
        assert AdjustmentType.INCREASE.minimum_quantity == 1
        assert AdjustmentType.DECREASE.minimum_quantity == 1

    def test_maps_onto_movement_type(self):
        assert AdjustmentType.DECREASE.movement_type is MovementType.DECREASE
