"""Inventory bounded context: stock accounting, allocation and order fulfillment.

Tracks on-hand, allocated and available stock per product and warehouse
location, records every balance change as an immutable stock movement, and
allocates stock against the order lifecycle (CQRS aggregates throughout).
"""

import structlog
from protean.domain import Domain

inventory = Domain(name="inventory")

logger = structlog.get_logger(__name__)
