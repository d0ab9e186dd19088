"""Read side for orders: the owner's order list and a single order's detail."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.address.address import Address
from ordering.coupon.coupon import Coupon
from ordering.order.cancellation import load_order
from ordering.order.order import Order


def orders_for_user(user_id, page=1, limit=10):
    """Return one page of the user's orders, newest first, and the total count."""
    results = (
        current_domain.repository_for(Order)
        ._dao.query.filter(user_id=str(user_id))
        .order_by("-created_at")
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return results.items, results.total


def order_detail(order_id, user_id) -> dict:
    """The order together with its delivery address and coupon, scoped to its owner."""
    order = load_order(order_id, owner_id=user_id)

    try:
        address = current_domain.repository_for(Address).get(order.address_id)
    except ObjectNotFoundError:
        address = None

    coupon = None
    if order.coupon_id:
        try:
            coupon = current_domain.repository_for(Coupon).get(order.coupon_id)
        except ObjectNotFoundError:
            coupon = None

    return {"order": order, "address": address, "coupon": coupon}
