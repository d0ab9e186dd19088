"""Coupon aggregate — named discount rules with a validity window and usage cap."""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import CouponExhausted


class DiscountType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


def _as_utc(value):
    """Treat naive datetimes as UTC so window checks never mix naive and aware values."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@ordering.aggregate
class Coupon:
    """A discount rule identified by its upper-cased code.

    `used_count` only ever grows, and only through `redeem()`, which refuses
    to go past `usage_limit`.
    """

    code = String(required=True, max_length=20, unique=True)
    description = String(max_length=255)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    min_purchase = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=0)
    used_count = Integer(default=0, min_value=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)

    @invariant.post
    def used_count_cannot_exceed_usage_limit(self):
        if self.usage_limit is not None and self.used_count > self.usage_limit:
            raise ValidationError({"used_count": ["Coupon usage cannot exceed its usage limit"]})

    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.start_date and self.end_date and _as_utc(self.end_date) < _as_utc(self.start_date):
            raise ValidationError({"end_date": ["End date must not be before start date"]})

    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        start_date,
        end_date,
        description=None,
        min_purchase=None,
        max_discount=None,
        usage_limit=None,
        is_active=True,
    ):
        normalized = (code or "").strip().upper()
        if not 3 <= len(normalized) <= 20:
            raise ValidationError({"code": ["Coupon code must be 3 to 20 characters"]})
        if discount_value is None or discount_value <= 0:
            raise ValidationError({"discount_value": ["Discount value must be positive"]})

        return cls(
            code=normalized,
            description=description,
            discount_type=discount_type,
            discount_value=discount_value,
            min_purchase=min_purchase,
            max_discount=max_discount,
            usage_limit=usage_limit,
            used_count=0,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
        )

    def has_uses_left(self) -> bool:
        return self.usage_limit is None or self.used_count < self.usage_limit

    def is_redeemable(self, now=None) -> bool:
        """Active, inside its validity window, and not used up."""
        now = _as_utc(now or datetime.now(UTC))
        if not self.is_active:
            return False
        if not _as_utc(self.start_date) <= now <= _as_utc(self.end_date):
            return False
        return self.has_uses_left()

    def discount_for(self, subtotal) -> float:
        """Discount this coupon grants on `subtotal`.

        A percentage discount is capped at `max_discount` when one is set; a
        fixed discount never exceeds the subtotal.
        """
        if self.discount_type == DiscountType.PERCENTAGE.value:
            discount = subtotal * (self.discount_value / 100)
            if self.max_discount:
                discount = min(discount, self.max_discount)
            return discount
        return min(self.discount_value, subtotal)

    def redeem(self):
        """Count one more use, refusing when the usage limit is already reached."""
        if not self.has_uses_left():
            raise CouponExhausted(f"Coupon {self.code} has reached its usage limit", coupon_id=str(self.id))
        self.used_count = self.used_count + 1


def find_coupon(code):
    """Look a coupon up by code, case-insensitively. Returns None when unknown."""
    if not code:
        return None
    repo = current_domain.repository_for(Coupon)
    matches = repo._dao.query.filter(code=code.strip().upper()).all().items
    return matches[0] if matches else None
