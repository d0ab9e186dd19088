"""Order placement — commands and handler.

PlaceOrder covers orders paid later (cash on delivery and friends).
PlacePaidOrder covers orders the gateway already took payment for: its
signature is checked before anything is read, and a mismatch ends the
command with nothing written.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.coupon.coupon import find_coupon
from ordering.domain import ordering
from ordering.errors import InvalidSignature
from ordering.order.commit import commit_order
from ordering.order.intake import validate_intake
from ordering.order.order import Order, PaymentMethod
from ordering.order.pricing import price_order
from payments.gateway import get_gateway
from payments.gateway.port import PaymentConfirmation

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    coupon_code = Text()
    notes = Text()
    items = Text(required=True)  # JSON: list of {product_id, variant_id, quantity}


@ordering.command(part_of="Order")
class PlacePaidOrder:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=255)
    gateway_payment_id = String(required=True, max_length=255)
    signature = String(required=True, max_length=255)
    coupon_code = Text()
    notes = Text()
    items = Text(required=True)  # JSON: list of {product_id, variant_id, quantity}


def _price_and_commit(command, payment_method, payment_id=None) -> Order:
    items = json.loads(command.items) if isinstance(command.items, str) else command.items
    lines = validate_intake(command.user_id, command.address_id, items)
    pricing = price_order(lines, coupon=find_coupon(command.coupon_code))
    return commit_order(
        user_id=command.user_id,
        address_id=command.address_id,
        lines=lines,
        pricing=pricing,
        payment_method=payment_method,
        payment_id=payment_id,
        notes=command.notes,
    )


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = _price_and_commit(command, payment_method=command.payment_method)
        return str(order.id)

    @handle(PlacePaidOrder)
    def place_paid_order(self, command):
        confirmation = PaymentConfirmation(
            gateway_order_id=command.gateway_order_id,
            gateway_payment_id=command.gateway_payment_id,
            signature=command.signature,
        )
        if not get_gateway().verify_payment_signature(confirmation):
            logger.warning(
                "payment_signature_rejected",
                user_id=str(command.user_id),
                gateway_order_id=command.gateway_order_id,
                gateway_payment_id=command.gateway_payment_id,
            )
            raise InvalidSignature("Invalid payment signature")

        order = _price_and_commit(
            command,
            payment_method=PaymentMethod.RAZORPAY.value,
            payment_id=command.gateway_payment_id,
        )
        return str(order.id)
