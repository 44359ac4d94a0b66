"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state: no cross-user sharing.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for a single simulated shopper journey."""

    customer_id: str | None = None
    email: str | None = None
    headers: dict = field(default_factory=dict)
    product_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    order_total: float = 0.0
