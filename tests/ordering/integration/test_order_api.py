"""Integration tests for the Ordering API endpoints via TestClient."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from notifications.channel import get_email_channel
from ordering.api import admin_router, order_router, payment_router, register_error_handlers
from ordering.catalogue.product import Product
from ordering.coupon.coupon import Coupon
from ordering.order.order import Order
from payments.gateway import set_gateway
from payments.gateway.razorpay_adapter import RazorpayGateway
from protean import current_domain

CUSTOMER = {"X-User-Id": "user-001", "X-User-Email": "asha@example.com"}
ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "ADMIN"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(payment_router)
    app.include_router(admin_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def catalogue(seed_address, seed_product):
    address = seed_address()
    product = seed_product(name="Aviator Classic", price=1000.0, stock=10)
    return {"address_id": address.id, "product_id": product.id}


def _order_body(catalogue, quantity=2, **extra):
    return {
        "addressId": catalogue["address_id"],
        "paymentMethod": "COD",
        "items": [{"productId": catalogue["product_id"], "quantity": quantity}],
        **extra,
    }


def _create_order(client, catalogue, **extra):
    response = client.post("/orders", json=_order_body(catalogue, **extra), headers=CUSTOMER)
    assert response.status_code == 201
    return response.json()["order"]


def _order_count():
    return current_domain.repository_for(Order)._dao.query.all().total


class TestCreateOrderEndpoint:
    def test_create_order(self, client, catalogue):
        order = _create_order(client, catalogue)

        assert order["orderNumber"].startswith("EF")
        assert order["total"] == 2000.0
        assert order["paymentMethod"] == "COD"

    def test_create_order_with_coupon(self, client, catalogue, seed_coupon):
        seed_coupon(code="FIRST10")

        order = _create_order(client, catalogue, couponCode="FIRST10")

        assert order["total"] == 1800.0

    def test_sends_confirmation_email(self, client, catalogue):
        order = _create_order(client, catalogue)

        [email] = get_email_channel().outbox
        assert email["to"] == "asha@example.com"
        assert order["orderNumber"] in email["subject"]

    def test_requires_user(self, client, catalogue):
        response = client.post("/orders", json=_order_body(catalogue))
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_empty_cart(self, client, catalogue):
        body = _order_body(catalogue)
        body["items"] = []
        response = client.post("/orders", json=body, headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json() == {"error": "Cart is empty"}

    def test_malformed_body(self, client, catalogue):
        body = _order_body(catalogue)
        body["items"][0]["quantity"] = 0
        response = client.post("/orders", json=body, headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid order data"}

    def test_unknown_payment_method(self, client, catalogue):
        response = client.post("/orders", json=_order_body(catalogue, paymentMethod="BARTER"), headers=CUSTOMER)
        assert response.status_code == 400

    def test_insufficient_stock(self, client, catalogue):
        response = client.post("/orders", json=_order_body(catalogue, quantity=11), headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json() == {"error": "Insufficient stock for Aviator Classic"}
        assert _order_count() == 0

    def test_address_of_another_user(self, client, catalogue):
        response = client.post(
            "/orders", json=_order_body(catalogue), headers={"X-User-Id": "user-002"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid address"}


class TestListOrdersEndpoint:
    def test_lists_own_orders_with_pagination(self, client, catalogue):
        for _ in range(3):
            _create_order(client, catalogue, quantity=1)

        response = client.get("/orders", params={"page": 1, "limit": 2}, headers=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert len(data["orders"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
        assert data["orders"][0]["itemCount"] == 1

    def test_other_users_see_nothing(self, client, catalogue):
        _create_order(client, catalogue)
        response = client.get("/orders", headers={"X-User-Id": "user-002"})
        assert response.json()["pagination"]["total"] == 0

    def test_requires_user(self, client):
        assert client.get("/orders").status_code == 401


class TestOrderDetailEndpoint:
    def test_detail(self, client, catalogue):
        created = _create_order(client, catalogue)

        response = client.get(f"/orders/{created['id']}", headers=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["orderNumber"] == created["orderNumber"]
        assert data["shippingCharge"] == 0.0
        assert data["address"]["city"] == "Bengaluru"
        assert data["items"][0]["productName"] == "Aviator Classic"
        assert data["tracking"][0]["status"] == "Order Placed"

    def test_tracking_is_newest_first(self, client, catalogue):
        created = _create_order(client, catalogue)
        client.patch(f"/orders/{created['id']}", json={"action": "cancel"}, headers=CUSTOMER)

        tracking = client.get(f"/orders/{created['id']}", headers=CUSTOMER).json()["tracking"]

        assert [entry["status"] for entry in tracking] == ["Order Cancelled", "Order Placed"]

    def test_other_users_order_is_not_found(self, client, catalogue):
        created = _create_order(client, catalogue)
        response = client.get(f"/orders/{created['id']}", headers={"X-User-Id": "user-002"})
        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}


class TestCancelOrderEndpoint:
    def test_cancel(self, client, catalogue, reload):
        created = _create_order(client, catalogue)

        response = client.patch(f"/orders/{created['id']}", json={"action": "cancel"}, headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Order cancelled successfully"}
        assert reload(Product, catalogue["product_id"]).stock == 10

    def test_unknown_action(self, client, catalogue):
        created = _create_order(client, catalogue)
        response = client.patch(f"/orders/{created['id']}", json={"action": "return"}, headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}

    def test_cancel_shipped_order(self, client, catalogue):
        created = _create_order(client, catalogue)
        for status in ("CONFIRMED", "PROCESSING", "SHIPPED"):
            client.patch(f"/admin/orders/{created['id']}/status", json={"status": status}, headers=ADMIN)

        response = client.patch(f"/orders/{created['id']}", json={"action": "cancel"}, headers=CUSTOMER)

        assert response.status_code == 400
        assert response.json() == {"error": "Order cannot be cancelled at this stage"}

    def test_cancel_someone_elses_order(self, client, catalogue):
        created = _create_order(client, catalogue)
        response = client.patch(
            f"/orders/{created['id']}", json={"action": "cancel"}, headers={"X-User-Id": "user-002"}
        )
        assert response.status_code == 404


class TestCreatePaymentEndpoint:
    def test_opens_gateway_order(self, client, razorpay_client):
        response = client.post(
            "/payment/create",
            json={"amount": 1800, "orderData": {"addressId": "addr-001", "items": []}},
            headers=CUSTOMER,
        )

        assert response.status_code == 200
        assert response.json() == {
            "razorpayOrderId": "order_T0001",
            "amount": 180000,
            "currency": "INR",
            "keyId": "rzp_test_key",
        }
        assert razorpay_client.created[0]["notes"] == {"userId": "user-001", "addressId": "addr-001"}

    @pytest.mark.parametrize("body", [{"amount": 0}, {"amount": -5}, {}])
    def test_invalid_amount(self, client, razorpay_client, body):
        response = client.post("/payment/create", json=body, headers=CUSTOMER)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid amount"}

    def test_missing_keys(self, client, monkeypatch):
        monkeypatch.delenv("RAZORPAY_KEY_ID", raising=False)
        set_gateway(RazorpayGateway(key_secret="secret-only"))
        response = client.post("/payment/create", json={"amount": 500}, headers=CUSTOMER)
        assert response.status_code == 500
        assert response.json() == {"error": "Payment configuration missing"}

    def test_gateway_failure(self, client, razorpay_client):
        razorpay_client.error = RuntimeError("upstream 502")
        response = client.post("/payment/create", json={"amount": 500}, headers=CUSTOMER)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create payment order"}

    def test_requires_user(self, client, razorpay_client):
        assert client.post("/payment/create", json={"amount": 500}).status_code == 401


class TestVerifyPaymentEndpoint:
    def _body(self, catalogue, signature):
        return {
            "razorpayOrderId": "order_Q1",
            "razorpayPaymentId": "pay_Q1",
            "razorpaySignature": signature,
            "orderData": {
                "addressId": catalogue["address_id"],
                "items": [{"productId": catalogue["product_id"], "quantity": 1}],
            },
        }

    def test_valid_signature_settles_the_order(self, client, catalogue, sign):
        response = client.post("/payment/verify", json=self._body(catalogue, sign("order_Q1", "pay_Q1")), headers=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        order = current_domain.repository_for(Order).get(data["order"]["id"])
        assert order.status == "CONFIRMED"
        assert order.payment_status == "PAID"

    def test_forged_signature(self, client, catalogue):
        response = client.post("/payment/verify", json=self._body(catalogue, "f" * 64), headers=CUSTOMER)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid payment signature"}
        assert _order_count() == 0


class TestAdminEndpoints:
    def test_status_change(self, client, catalogue):
        created = _create_order(client, catalogue)

        response = client.patch(f"/admin/orders/{created['id']}/status", json={"status": "CONFIRMED"}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"

    def test_invalid_transition(self, client, catalogue):
        created = _create_order(client, catalogue)
        response = client.patch(f"/admin/orders/{created['id']}/status", json={"status": "DELIVERED"}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json() == {"error": "Cannot transition from PENDING to DELIVERED"}

    def test_requires_admin_role(self, client, catalogue):
        created = _create_order(client, catalogue)
        response = client.patch(
            f"/admin/orders/{created['id']}/status", json={"status": "CONFIRMED"}, headers=CUSTOMER
        )
        assert response.status_code == 401

    def test_refund(self, client, catalogue, sign):
        paid = client.post(
            "/payment/verify",
            json=TestVerifyPaymentEndpoint()._body(catalogue, sign("order_Q1", "pay_Q1")),
            headers=CUSTOMER,
        ).json()["order"]

        response = client.post(f"/admin/orders/{paid['id']}/refund", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["paymentStatus"] == "REFUNDED"
        assert response.json()["status"] == "CANCELLED"

    def test_refund_missing_order(self, client):
        response = client.post("/admin/orders/no-such-order/refund", headers=ADMIN)
        assert response.status_code == 404

    def test_create_coupon(self, client):
        now = datetime.now(UTC)
        response = client.post(
            "/admin/coupons",
            json={
                "code": "summer25",
                "discountType": "PERCENTAGE",
                "discountValue": 25,
                "maxDiscount": 500,
                "startDate": now.isoformat(),
                "endDate": (now + timedelta(days=30)).isoformat(),
            },
            headers=ADMIN,
        )

        assert response.status_code == 201
        assert response.json()["code"] == "SUMMER25"
        coupon = current_domain.repository_for(Coupon).get(response.json()["id"])
        assert coupon.max_discount == 500

    def test_duplicate_coupon_code(self, client, seed_coupon):
        seed_coupon(code="FIRST10")
        now = datetime.now(UTC)
        response = client.post(
            "/admin/coupons",
            json={
                "code": "first10",
                "discountType": "FIXED",
                "discountValue": 100,
                "startDate": now.isoformat(),
                "endDate": (now + timedelta(days=1)).isoformat(),
            },
            headers=ADMIN,
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Coupon code already exists"}
