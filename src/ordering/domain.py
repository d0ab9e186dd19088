"""Ordering bounded context — order lifecycle and payment settlement.

Turns a validated cart into a durable order, enforces stock and coupon
limits inside a single unit of work, settles verified online payments, and
runs the compensations when an order is cancelled. Products, coupons and
addresses live here too so that one transaction spans every write of a commit.
"""

import structlog
from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging(log_file_prefix="ordering")

logger = structlog.get_logger(__name__)

ordering = Domain(name="ordering")
