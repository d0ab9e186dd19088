"""Domain events for the Order aggregate.

Raised inside the same unit of work that persists the order change, so an
event is only ever published for a change that actually committed.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was committed, with its stock withdrawn and coupon redeemed."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    discount = Float(default=0.0)
    shipping_charge = Float(default=0.0)
    total = Float(required=True)
    payment_method = String(required=True)
    payment_status = String(required=True)
    coupon_id = Identifier()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled and the stock of every line put back."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    payment_status = String(required=True)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRefunded:
    """The payment for an order was refunded by an administrator."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    amount = Float(required=True)
    refunded_at = DateTime(required=True)
