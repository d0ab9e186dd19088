"""The order commit: order, items, stock withdrawals, coupon redemption and first ledger entry.

`commit_order()` runs inside the unit of work of the command handler that
calls it. Every aggregate is re-read and mutated in memory first; nothing is
handed to a repository until all stock withdrawals and the coupon redemption
have succeeded, and the unit of work then persists everything together or
nothing at all. Concurrent commits that touched the same product or coupon
are caught by the aggregates' version check when the unit of work commits.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.coupon.coupon import Coupon
from ordering.errors import CouponExhausted, Unavailable
from ordering.order.numbering import allocate_order_number
from ordering.order.order import Order


def _withdraw_stock(lines) -> list[Product]:
    repo = current_domain.repository_for(Product)
    products = {}
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            try:
                product = repo.get(line.product_id)
            except ObjectNotFoundError:
                raise Unavailable("Some products are unavailable", product_ids=[line.product_id]) from None
            if not product.is_active:
                raise Unavailable("Some products are unavailable", product_ids=[line.product_id])
            products[line.product_id] = product
        product.withdraw_stock(line.quantity, variant_id=line.variant_id)
    return list(products.values())


def _redeem_coupon(coupon_id) -> Coupon | None:
    if not coupon_id:
        return None
    try:
        coupon = current_domain.repository_for(Coupon).get(coupon_id)
    except ObjectNotFoundError:
        raise CouponExhausted("Coupon is no longer available", coupon_id=str(coupon_id)) from None
    coupon.redeem()
    return coupon


def commit_order(
    user_id,
    address_id,
    lines,
    pricing,
    payment_method,
    payment_id=None,
    notes=None,
) -> Order:
    """Create the order and apply every resource mutation it implies.

    Raises:
        Unavailable: a line can no longer be covered by current stock.
        CouponExhausted: the coupon reached its usage limit since pricing.
        CommitFailed: no unique order number could be allocated.
    """
    order_number = allocate_order_number()

    products = _withdraw_stock(lines)
    coupon = _redeem_coupon(pricing.coupon_id)

    order = Order.place(
        order_number=order_number,
        user_id=user_id,
        address_id=address_id,
        lines=lines,
        pricing=pricing,
        payment_method=payment_method,
        payment_id=payment_id,
        notes=notes,
    )

    product_repo = current_domain.repository_for(Product)
    for product in products:
        product_repo.add(product)
    if coupon is not None:
        current_domain.repository_for(Coupon).add(coupon)
    current_domain.repository_for(Order).add(order)

    return order


def restore_stock(order: Order) -> None:
    """Put back the stock of every line of a cancelled order.

    Runs in the same unit of work as the cancellation itself.
    """
    repo = current_domain.repository_for(Product)
    products = {}
    for item in order.items:
        product_id = str(item.product_id)
        product = products.get(product_id)
        if product is None:
            product = repo.get(product_id)
            products[product_id] = product
        product.restore_stock(item.quantity, variant_id=item.variant_id)

    for product in products.values():
        repo.add(product)
