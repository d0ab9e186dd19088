"""Coupon administration — command and handler."""

from protean import handle
from protean.fields import Boolean, DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon, DiscountType, find_coupon
from ordering.domain import ordering
from ordering.errors import InvalidRequest


@ordering.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=20)
    description = String(max_length=255)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    min_purchase = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)


@ordering.command_handler(part_of=Coupon)
class CouponCommandHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        if find_coupon(command.code) is not None:
            raise InvalidRequest("Coupon code already exists", code=command.code.strip().upper())

        coupon = Coupon.create(
            code=command.code,
            description=command.description,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            min_purchase=command.min_purchase,
            max_discount=command.max_discount,
            usage_limit=command.usage_limit,
            start_date=command.start_date,
            end_date=command.end_date,
            is_active=command.is_active,
        )
        current_domain.repository_for(Coupon).add(coupon)
        return str(coupon.id)
