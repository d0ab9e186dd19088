"""Order aggregate — the unit the checkout commit creates.

An order is created once, fully priced, by `Order.place()`. Its items and the
prices captured on them never change afterwards; only the status, the payment
status, the tracking ledger and `updated_at` move.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    PENDING/CONFIRMED → CANCELLED

Payment status runs alongside:
    PENDING → PAID → REFUND_PENDING (paid order cancelled) → REFUNDED
    PENDING → CANCELLED (unpaid order cancelled)
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.domain import ordering
from ordering.errors import InvalidTransition
from ordering.order.events import OrderCancelled, OrderPlaced, OrderRefunded, OrderStatusChanged
from ordering.order.tracking import (
    MESSAGES,
    ORDER_CANCELLED,
    ORDER_CONFIRMED,
    ORDER_PLACED,
    REFUNDED,
    STATUS_LABELS,
    TrackingEvent,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUND_PENDING = "REFUND_PENDING"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"


class PaymentMethod(Enum):
    COD = "COD"
    RAZORPAY = "RAZORPAY"
    UPI = "UPI"


class CancellationActor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

# States from which cancellation is allowed
_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

_REFUNDABLE_PAYMENT_STATES = {PaymentStatus.PAID, PaymentStatus.REFUND_PENDING}


def _same_amount(a, b) -> bool:
    return round(a or 0.0, 2) == round(b or 0.0, 2)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product (and optionally one of its variants) bought at a captured price.

    `price` is the unit price at the moment the order was placed and is never
    re-read from the catalog.
    """

    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    items = HasMany(OrderItem)
    tracking = HasMany(TrackingEvent)
    subtotal = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    shipping_charge = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_id = String(max_length=255)
    coupon_id = Identifier()
    notes = Text()
    cancelled_by = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_balance(self):
        if not _same_amount(self.total, self.subtotal - (self.discount or 0.0) + (self.shipping_charge or 0.0)):
            raise ValidationError({"total": ["Total must equal subtotal - discount + shipping charge"]})

    @invariant.post
    def subtotal_must_match_items(self):
        if not self.items:
            return
        if not _same_amount(self.subtotal, sum(item.line_total for item in self.items)):
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of captured item prices"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        user_id,
        address_id,
        lines,
        pricing,
        payment_method,
        payment_id=None,
        notes=None,
    ):
        """Create a fully priced order from resolved lines.

        A `payment_id` means the payment was already verified with the
        gateway: the order starts CONFIRMED and PAID. Without one it starts
        PENDING on both axes.

        Args:
            lines: Resolved lines carrying product_id, variant_id,
                   product_name, unit_price and quantity.
            pricing: The PriceBreakdown computed for those lines.
        """
        now = datetime.now(UTC)
        paid = payment_id is not None

        items = [
            OrderItem(
                product_id=line.product_id,
                variant_id=line.variant_id,
                product_name=line.product_name,
                quantity=line.quantity,
                price=line.unit_price,
            )
            for line in lines
        ]

        order = cls(
            order_number=order_number,
            user_id=user_id,
            address_id=address_id,
            items=items,
            subtotal=pricing.subtotal,
            discount=pricing.discount,
            shipping_charge=pricing.shipping_charge,
            total=pricing.total,
            status=(OrderStatus.CONFIRMED if paid else OrderStatus.PENDING).value,
            payment_method=payment_method,
            payment_status=(PaymentStatus.PAID if paid else PaymentStatus.PENDING).value,
            payment_id=payment_id,
            coupon_id=pricing.coupon_id,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.record_tracking(ORDER_CONFIRMED if paid else ORDER_PLACED)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id),
                item_count=len(items),
                subtotal=order.subtotal,
                discount=order.discount,
                shipping_charge=order.shipping_charge,
                total=order.total,
                payment_method=order.payment_method,
                payment_status=order.payment_status,
                coupon_id=str(pricing.coupon_id) if pricing.coupon_id else None,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Tracking ledger
    # -------------------------------------------------------------------
    def record_tracking(self, label, message=None):
        """Append a milestone to the ledger. Entries are never edited or removed."""
        event = TrackingEvent(
            status=label,
            message=message or MESSAGES.get(label),
            sequence=len(self.tracking) + 1,
            created_at=datetime.now(UTC),
        )
        self.add_tracking(event)
        return event

    def timeline(self, newest_first=False):
        return sorted(self.tracking, key=lambda event: event.sequence, reverse=newest_first)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def can_cancel(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def cancel(self, cancelled_by=CancellationActor.CUSTOMER.value):
        """Cancel the order. Putting stock back is the caller's job.

        An order that was already paid moves its payment to REFUND_PENDING;
        an unpaid one has its payment cancelled. Coupon usage stays counted.
        """
        current = OrderStatus(self.status)
        if current not in _CANCELLABLE_STATES:
            raise InvalidTransition(
                "Order cannot be cancelled at this stage",
                order_id=str(self.id),
                status=current.value,
            )

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        if PaymentStatus(self.payment_status) == PaymentStatus.PAID:
            self.payment_status = PaymentStatus.REFUND_PENDING.value
        else:
            self.payment_status = PaymentStatus.CANCELLED.value
        self.cancelled_by = cancelled_by
        self.updated_at = now
        self.record_tracking(ORDER_CANCELLED)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                payment_status=self.payment_status,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    def change_status(self, new_status):
        """Move to `new_status` along the transition map.

        Moving to CANCELLED goes through `cancel()` so the payment axis and
        the ledger are handled the same way as a customer cancellation.
        """
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status {new_status}"]}) from None

        if target == OrderStatus.CANCELLED:
            self.cancel(cancelled_by=CancellationActor.ADMIN.value)
            return

        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(
                f"Cannot transition from {current.value} to {target.value}",
                order_id=str(self.id),
            )

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.record_tracking(STATUS_LABELS[target.value])

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                from_status=current.value,
                to_status=target.value,
                changed_at=now,
            )
        )

    def refund(self):
        """Mark the payment refunded, cancelling the order first while that is still possible.

        Returns True when the order was cancelled as part of the refund, so
        the caller knows to put the stock back.
        """
        if PaymentStatus(self.payment_status) not in _REFUNDABLE_PAYMENT_STATES:
            raise InvalidTransition(
                "Only paid orders can be refunded",
                order_id=str(self.id),
                payment_status=self.payment_status,
            )

        cancelled = False
        if self.can_cancel():
            self.cancel(cancelled_by=CancellationActor.ADMIN.value)
            cancelled = True

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self.record_tracking(REFUNDED)

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                order_number=self.order_number,
                amount=self.total,
                refunded_at=now,
            )
        )
        return cancelled
