"""Stock severity classification against a reorder level."""

from enum import Enum


class AlertSeverity(Enum):
    OUT_OF_STOCK = "OUT_OF_STOCK"
    CRITICAL = "CRITICAL"
    LOW = "LOW"


def classify(available: int, reorder_level: int) -> AlertSeverity | None:
    """Classify an available quantity against its reorder level.

    >>> classify(0, 10)
    <AlertSeverity.OUT_OF_STOCK: 'OUT_OF_STOCK'>
    >>> classify(4, 10)
    <AlertSeverity.CRITICAL: 'CRITICAL'>
    >>> classify(8, 10)
    <AlertSeverity.LOW: 'LOW'>
    >>> classify(11, 10) is None
    True
    """
    if available == 0:
        return AlertSeverity.OUT_OF_STOCK
    if available <= reorder_level * 0.5:
        return AlertSeverity.CRITICAL
    if available <= reorder_level:
        return AlertSeverity.LOW
    return None
