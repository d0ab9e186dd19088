"""Pricing and discount engine.

Pure arithmetic over resolved order lines and an optional coupon. Nothing is
read from or written to a repository here.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from ordering.errors import MinimumPurchaseNotMet

logger = structlog.get_logger(__name__)

FREE_SHIPPING_THRESHOLD = 999
FLAT_SHIPPING_CHARGE = 99


@dataclass(frozen=True)
class PriceBreakdown:
    """Monetary fields of an order. `coupon_id` is set only when a discount applied."""

    subtotal: float
    discount: float = 0.0
    shipping_charge: float = 0.0
    total: float = 0.0
    coupon_id: str | None = None


def shipping_charge_for(subtotal: float) -> float:
    return 0.0 if subtotal >= FREE_SHIPPING_THRESHOLD else float(FLAT_SHIPPING_CHARGE)


def price_order(lines, coupon=None, now: datetime | None = None) -> PriceBreakdown:
    """Price `lines` and apply `coupon` when it is redeemable.

    A coupon that is inactive, outside its window or used up is ignored and
    the order is priced without it. A redeemable coupon whose minimum
    purchase is not met rejects the order instead.

    Args:
        lines: Items with `unit_price` and `quantity`.
        coupon: The Coupon matching the supplied code, or None.
        now: Clock override for the validity window check.

    Raises:
        MinimumPurchaseNotMet: subtotal is below the coupon's minimum purchase.
    """
    subtotal = sum(line.unit_price * line.quantity for line in lines)
    shipping_charge = shipping_charge_for(subtotal)

    discount = 0.0
    coupon_id = None
    if coupon is not None:
        if not coupon.is_redeemable(now or datetime.now(UTC)):
            logger.info("coupon_ignored", coupon_code=coupon.code, subtotal=subtotal)
        else:
            if coupon.min_purchase and subtotal < coupon.min_purchase:
                raise MinimumPurchaseNotMet(
                    f"Minimum purchase of ₹{coupon.min_purchase:g} required for this coupon",
                    coupon_code=coupon.code,
                )
            discount = coupon.discount_for(subtotal)
            coupon_id = str(coupon.id)

    subtotal = round(subtotal, 2)
    discount = round(discount, 2)
    return PriceBreakdown(
        subtotal=subtotal,
        discount=discount,
        shipping_charge=shipping_charge,
        total=round(subtotal - discount + shipping_charge, 2),
        coupon_id=coupon_id,
    )
