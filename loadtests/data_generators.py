"""Faker-based data generators for the checkout load tests.

Identifiers of the seeded catalog come from the environment, as printed by
`python src/manage.py seed-demo`:

    LOADTEST_USER_ID       owner of the seeded address (default: demo-user)
    LOADTEST_ADDRESS_ID    the seeded address id
    LOADTEST_PRODUCT_IDS   comma-separated product ids to contend on
    RAZORPAY_KEY_SECRET    secret the server verifies payment signatures with
"""

import os
import random
import uuid

from faker import Faker

from payments.gateway.razorpay_adapter import RazorpayGateway

fake = Faker()


def user_id() -> str:
    return os.environ.get("LOADTEST_USER_ID", "demo-user")


def session_headers() -> dict:
    return {"X-User-Id": user_id(), "X-User-Email": fake.email()}


def product_ids() -> list[str]:
    return [pid for pid in os.environ.get("LOADTEST_PRODUCT_IDS", "").split(",") if pid]


def order_lines(max_lines: int = 2) -> list[dict]:
    """One or two lines against the seeded products, small quantities to force contention."""
    ids = product_ids()
    chosen = random.sample(ids, k=min(len(ids), random.randint(1, max_lines)))
    return [{"productId": pid, "quantity": random.randint(1, 3)} for pid in chosen]


def cod_order_data() -> dict:
    """Generate a POST /orders payload matching CreateOrderRequest."""
    payload = {
        "addressId": os.environ.get("LOADTEST_ADDRESS_ID", ""),
        "paymentMethod": "COD",
        "items": order_lines(),
    }
    if random.random() < 0.3:
        payload["notes"] = fake.sentence(nb_words=6)
    if random.random() < 0.2:
        payload["couponCode"] = "FIRST10"
    return payload


def paid_order_data() -> dict:
    """Generate a POST /payment/verify payload carrying a valid gateway signature."""
    gateway_order_id = f"order_{uuid.uuid4().hex[:14]}"
    gateway_payment_id = f"pay_{uuid.uuid4().hex[:14]}"
    gateway = RazorpayGateway()
    return {
        "razorpayOrderId": gateway_order_id,
        "razorpayPaymentId": gateway_payment_id,
        "razorpaySignature": gateway.sign(gateway_order_id, gateway_payment_id),
        "orderData": {
            "addressId": os.environ.get("LOADTEST_ADDRESS_ID", ""),
            "items": order_lines(),
        },
    }


def forged_order_data() -> dict:
    """A paid-order payload whose signature does not match."""
    payload = paid_order_data()
    payload["razorpaySignature"] = "0" * 64
    return payload
