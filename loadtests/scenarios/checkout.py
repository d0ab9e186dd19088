"""Checkout contention scenarios.

Many users buy the same few products at once. A run is healthy when every
request either succeeds or is rejected for stock; the server logs show no
order_commit_failed events.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cod_order_data, forged_order_data, paid_order_data, session_headers
from loadtests.helpers.response import extract_error_detail, is_stock_rejection
from loadtests.helpers.state import OrderState


class CodCheckoutJourney(SequentialTaskSet):
    """Place COD Order -> Read It Back -> Cancel (half the time).

    Cancellation puts the stock back, so the contended products keep
    oscillating around sold-out instead of draining once.
    """

    def on_start(self):
        self.state = OrderState()
        self.headers = session_headers()

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=cod_order_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                order = resp.json()["order"]
                self.state.order_id = order["id"]
                self.state.order_number = order["orderNumber"]
            elif is_stock_rejection(resp):
                self.state.rejected_for_stock += 1
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Place order failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def read_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.headers,
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Read order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def cancel_order(self):
        if random.random() < 0.5:
            self.interrupt()
            return
        with self.client.patch(
            f"/orders/{self.state.order_id}",
            json={"action": "cancel"},
            headers=self.headers,
            catch_response=True,
            name="PATCH /orders/{id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "CANCELLED"
            else:
                resp.failure(f"Cancel order failed: {resp.status_code} — {extract_error_detail(resp)}")
        self.interrupt()


class PaidCheckoutJourney(SequentialTaskSet):
    """Settle a correctly signed payment, then try a forged one that must be rejected."""

    def on_start(self):
        self.headers = session_headers()

    @task
    def settle_payment(self):
        with self.client.post(
            "/payment/verify",
            json=paid_order_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /payment/verify",
        ) as resp:
            if resp.status_code == 200 or is_stock_rejection(resp):
                resp.success()
            else:
                resp.failure(f"Settle payment failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def forged_payment(self):
        with self.client.post(
            "/payment/verify",
            json=forged_order_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /payment/verify (forged)",
        ) as resp:
            if resp.status_code == 400 and extract_error_detail(resp) == "Invalid payment signature":
                resp.success()
            else:
                resp.failure(f"Forged payment was not rejected: {resp.status_code}")
        self.interrupt()


class CheckoutUser(HttpUser):
    """Mostly cash-on-delivery buyers, with some paying online."""

    tasks = {CodCheckoutJourney: 3, PaidCheckoutJourney: 1}
    wait_time = between(0.1, 0.5)
