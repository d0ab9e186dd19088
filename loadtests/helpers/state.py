"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks the order a journey placed so follow-up requests can reference it.
"""

from dataclasses import dataclass


@dataclass
class OrderState:
    """Tracks state for a single order lifecycle."""

    order_id: str | None = None
    order_number: str | None = None
    current_status: str = "PENDING"
    rejected_for_stock: int = 0
