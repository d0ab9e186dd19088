"""Application service for orders — what the API calls.

Each function builds a command, processes it synchronously (one unit of work
per call), logs the outcome and, after a successful placement, sends the
confirmation email. Store failures are reported as CommitFailed; version
conflicts on stock or coupons are reported as Unavailable.
"""

import json
import time

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from notifications.dispatch import send_order_confirmation
from ordering.address.address import Address
from ordering.errors import CommitFailed, InvalidRequest, OrderingError, PaymentOrderFailed, Unavailable
from ordering.order.administration import RefundOrder, UpdateOrderStatus
from ordering.order.cancellation import CancelOrder
from ordering.order.order import Order
from ordering.order.placement import PlaceOrder, PlacePaidOrder
from payments.gateway import get_gateway
from payments.gateway.port import GatewayConfigurationError, GatewayOrder

logger = structlog.get_logger(__name__)


def _process(command, failure_message):
    try:
        return current_domain.process(command, asynchronous=False)
    except (OrderingError, ValidationError, GatewayConfigurationError):
        raise
    except ExpectedVersionError as exc:
        logger.warning("order_commit_conflict", command=type(command).__name__, error=str(exc))
        raise Unavailable("Some products are no longer available") from exc
    except Exception as exc:
        logger.error("order_commit_failed", command=type(command).__name__, error=str(exc), exc_info=True)
        raise CommitFailed(failure_message) from exc


def _confirmation_context(order: Order) -> dict:
    try:
        address = current_domain.repository_for(Address).get(order.address_id)
        customer_name = address.name
    except ObjectNotFoundError:
        customer_name = None

    return {
        "order_number": order.order_number,
        "customer_name": customer_name,
        "items": [
            {"name": item.product_name, "quantity": item.quantity, "price": item.price}
            for item in order.items
        ],
        "subtotal": order.subtotal,
        "discount": order.discount,
        "shipping_charge": order.shipping_charge,
        "total": order.total,
        "payment_method": order.payment_method,
    }


def _after_placement(order_id, user_email) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    logger.info(
        "order_placed",
        order_id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id),
        total=order.total,
        payment_method=order.payment_method,
        status=order.status,
    )
    send_order_confirmation(user_email, _confirmation_context(order))
    return order


def place_order(user_id, address_id, payment_method, items, coupon_code=None, notes=None, user_email=None) -> Order:
    """Place an order that will be paid later. It starts PENDING/PENDING."""
    command = PlaceOrder(
        user_id=user_id,
        address_id=address_id,
        payment_method=payment_method,
        coupon_code=coupon_code,
        notes=notes,
        items=json.dumps(items),
    )
    order_id = _process(command, "Failed to create order")
    return _after_placement(order_id, user_email)


def settle_paid_order(
    user_id,
    gateway_order_id,
    gateway_payment_id,
    signature,
    address_id,
    items,
    coupon_code=None,
    notes=None,
    user_email=None,
) -> Order:
    """Place an order the gateway already took payment for. It starts CONFIRMED/PAID."""
    command = PlacePaidOrder(
        user_id=user_id,
        address_id=address_id,
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        signature=signature,
        coupon_code=coupon_code,
        notes=notes,
        items=json.dumps(items),
    )
    order_id = _process(command, "Payment verification failed")
    return _after_placement(order_id, user_email)


def cancel_order(user_id, order_id) -> Order:
    _process(CancelOrder(order_id=order_id, user_id=user_id), "Failed to cancel order")
    order = current_domain.repository_for(Order).get(order_id)
    logger.info(
        "order_cancelled",
        order_id=str(order.id),
        order_number=order.order_number,
        payment_status=order.payment_status,
        cancelled_by=order.cancelled_by,
    )
    return order


def change_order_status(order_id, status) -> Order:
    _process(UpdateOrderStatus(order_id=order_id, status=status), "Failed to update order status")
    order = current_domain.repository_for(Order).get(order_id)
    logger.info("order_status_changed", order_id=str(order.id), order_number=order.order_number, status=order.status)
    return order


def refund_order(order_id) -> Order:
    _process(RefundOrder(order_id=order_id), "Failed to refund order")
    order = current_domain.repository_for(Order).get(order_id)
    logger.info(
        "order_refunded",
        order_id=str(order.id),
        order_number=order.order_number,
        amount=order.total,
        status=order.status,
    )
    return order


PAYMENT_CURRENCY = "INR"


def open_payment_order(user_id, amount, address_id=None) -> GatewayOrder:
    """Open the gateway order an online checkout pays against.

    Nothing is stored here: the ordering side only starts when the signed
    confirmation comes back through `settle_paid_order()`.
    """
    if not amount or amount <= 0:
        raise InvalidRequest("Invalid amount", amount=amount)

    notes = {"userId": str(user_id)}
    if address_id:
        notes["addressId"] = str(address_id)

    gateway = get_gateway()
    try:
        gateway_order = gateway.create_payment_order(
            amount=amount,
            currency=PAYMENT_CURRENCY,
            receipt=f"receipt_{time.time_ns() // 1_000_000}",
            notes=notes,
        )
    except GatewayConfigurationError:
        logger.error("payment_configuration_missing", gateway=gateway.name)
        raise
    except Exception as exc:
        logger.error("payment_order_failed", gateway=gateway.name, error=str(exc), exc_info=True)
        raise PaymentOrderFailed("Failed to create payment order") from exc

    logger.info(
        "payment_order_created",
        user_id=str(user_id),
        gateway_order_id=gateway_order.gateway_order_id,
        amount=gateway_order.amount,
        currency=gateway_order.currency,
    )
    return gateway_order
