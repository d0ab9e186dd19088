"""Human-facing order numbers: prefix + base-36 millisecond timestamp + random suffix."""

import secrets
import time

from protean.utils.globals import current_domain

from ordering.errors import CommitFailed
from ordering.order.order import Order

ORDER_NUMBER_PREFIX = "EF"
MAX_ATTEMPTS = 5

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_order_number(now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(4))
    return f"{ORDER_NUMBER_PREFIX}{to_base36(now_ms)}{suffix}"


def order_number_taken(order_number) -> bool:
    repo = current_domain.repository_for(Order)
    return bool(repo._dao.query.filter(order_number=order_number).all().items)


def allocate_order_number(generate=generate_order_number) -> str:
    """Return an order number no stored order uses yet.

    The field's unique constraint is the last word; this check keeps
    collisions from ever reaching it in practice.
    """
    for _ in range(MAX_ATTEMPTS):
        candidate = generate()
        if not order_number_taken(candidate):
            return candidate
    raise CommitFailed("Could not allocate a unique order number")
