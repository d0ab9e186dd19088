"""Order tracking ledger — append-only lifecycle milestones attached to an order.

Entries are only ever added through `Order.record_tracking()`. Each carries a
per-order sequence number so the timeline has a stable order even when two
entries share a timestamp.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Integer, String

from ordering.domain import ordering

ORDER_PLACED = "Order Placed"
ORDER_CONFIRMED = "Order Confirmed"
ORDER_PROCESSING = "Order Processing"
ORDER_SHIPPED = "Order Shipped"
ORDER_DELIVERED = "Order Delivered"
ORDER_CANCELLED = "Order Cancelled"
ORDER_RETURNED = "Order Returned"
REFUNDED = "Refunded"

MESSAGES = {
    ORDER_PLACED: "Your order has been placed successfully",
    ORDER_CONFIRMED: "Payment successful! Your order has been confirmed.",
    ORDER_PROCESSING: "Your order is being prepared",
    ORDER_SHIPPED: "Your order has been shipped",
    ORDER_DELIVERED: "Your order has been delivered",
    ORDER_CANCELLED: "Your order has been cancelled",
    ORDER_RETURNED: "Your order has been returned",
    REFUNDED: "Order refunded by admin",
}

# Ledger label for each order status reached through a status change
STATUS_LABELS = {
    "CONFIRMED": ORDER_CONFIRMED,
    "PROCESSING": ORDER_PROCESSING,
    "SHIPPED": ORDER_SHIPPED,
    "DELIVERED": ORDER_DELIVERED,
    "CANCELLED": ORDER_CANCELLED,
    "RETURNED": ORDER_RETURNED,
}


@ordering.entity(part_of="Order")
class TrackingEvent:
    status = String(required=True, max_length=50)
    message = String(max_length=500)
    sequence = Integer(required=True, min_value=1)
    created_at = DateTime(default=lambda: datetime.now(UTC))

