import os
from datetime import UTC, datetime, timedelta

import pytest

TEST_PAYMENT_SECRET = "test_razorpay_secret"


@pytest.fixture(scope="session")
def _ordering_domain(request):
    """Initialize the ordering domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session", autouse=True)
def setup_db(_ordering_domain):
    from ordering.utils.db import drop_db, setup_db

    setup_db(_ordering_domain)

    yield

    drop_db(_ordering_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain):
    """Push domain context before each test, cleanup after."""
    from notifications.channel import reset_channels
    from payments.gateway import reset_gateway, set_gateway
    from payments.gateway.razorpay_adapter import RazorpayGateway

    set_gateway(RazorpayGateway(key_secret=TEST_PAYMENT_SECRET))

    ctx = _ordering_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_gateway()
    reset_channels()


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------
@pytest.fixture
def seed_address():
    from ordering.address.address import Address
    from protean import current_domain

    def _seed(user_id="user-001", **overrides):
        data = {
            "user_id": user_id,
            "name": "Asha Rao",
            "phone": "9876543210",
            "street": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
        }
        data.update(overrides)
        address = Address(**data)
        current_domain.repository_for(Address).add(address)
        return address

    return _seed


@pytest.fixture
def seed_product():
    from ordering.catalogue.product import Product, Variant
    from protean import current_domain

    def _seed(name="Aviator Classic", price=1000.0, stock=10, is_active=True, variants=None):
        product = Product(
            name=name,
            price=price,
            stock=stock,
            is_active=is_active,
            variants=[Variant(**variant) for variant in (variants or [])],
        )
        current_domain.repository_for(Product).add(product)
        return product

    return _seed


@pytest.fixture
def seed_coupon():
    from ordering.coupon.coupon import Coupon
    from protean import current_domain

    def _seed(code="FIRST10", discount_type="PERCENTAGE", discount_value=10, **overrides):
        now = datetime.now(UTC)
        data = {
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=30),
        }
        data.update(overrides)
        coupon = Coupon.create(code=code, discount_type=discount_type, discount_value=discount_value, **data)
        current_domain.repository_for(Coupon).add(coupon)
        return coupon

    return _seed


@pytest.fixture
def reload():
    """Re-read an aggregate from its repository."""
    from protean import current_domain

    def _reload(cls, identifier):
        return current_domain.repository_for(cls).get(str(identifier))

    return _reload


@pytest.fixture
def sign():
    from payments.gateway.razorpay_adapter import RazorpayGateway

    return RazorpayGateway(key_secret=TEST_PAYMENT_SECRET).sign


class RecordingRazorpayClient:
    """Stands in for `razorpay.Client`: records `order.create` calls and answers like Razorpay."""

    def __init__(self, error: Exception | None = None):
        self.order = self
        self.created: list[dict] = []
        self.error = error

    def create(self, data):
        if self.error is not None:
            raise self.error
        self.created.append(data)
        return {
            "id": f"order_T{len(self.created):04d}",
            "entity": "order",
            "amount": data["amount"],
            "currency": data["currency"],
            "receipt": data["receipt"],
            "notes": data["notes"],
            "status": "created",
        }


@pytest.fixture
def razorpay_client():
    """Install a Razorpay gateway with both keys whose SDK client records orders instead of calling out."""
    from payments.gateway import set_gateway
    from payments.gateway.razorpay_adapter import RazorpayGateway

    client = RecordingRazorpayClient()
    set_gateway(RazorpayGateway(key_id="rzp_test_key", key_secret=TEST_PAYMENT_SECRET, client=client))
    return client
