"""Per-user state for the Locust scenarios; nothing is shared across users."""

from dataclasses import dataclass, field


@dataclass
class StockState:
    product_id: str | None = None
    on_hand: int = 0
    allocated: int = 0


@dataclass
class OrderState:
    product_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    item_ids: list[str] = field(default_factory=list)
