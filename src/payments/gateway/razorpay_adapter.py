"""Razorpay payment gateway adapter.

Checkout starts by opening a Razorpay order through the official SDK; the
browser pays against it. Razorpay then signs the completed checkout with
HMAC-SHA256 over ``"<order_id>|<payment_id>"`` keyed with the account's key
secret. Recomputing that signature server-side is the only proof that the
payment confirmation was not forged by the client.
"""

import hashlib
import hmac
import os
import secrets

import razorpay

from payments.gateway.port import GatewayConfigurationError, GatewayOrder, PaymentConfirmation, PaymentGateway


class RazorpayGateway(PaymentGateway):
    name = "razorpay"

    def __init__(self, key_id: str | None = None, key_secret: str | None = None, client=None) -> None:
        self._key_id = key_id if key_id is not None else os.environ.get("RAZORPAY_KEY_ID")
        self._key_secret = key_secret if key_secret is not None else os.environ.get("RAZORPAY_KEY_SECRET")
        self._client = client

    @property
    def public_key(self) -> str | None:
        return self._key_id

    def _sdk(self) -> razorpay.Client:
        if not self._key_id or not self._key_secret:
            raise GatewayConfigurationError("Payment configuration missing")
        if self._client is None:
            self._client = razorpay.Client(auth=(self._key_id, self._key_secret))
        return self._client

    def create_payment_order(self, amount: float, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        """Open a Razorpay order. Razorpay takes amounts in paise."""
        created = self._sdk().order.create(
            data={
                "amount": round(amount * 100),
                "currency": currency,
                "receipt": receipt,
                "notes": notes,
            }
        )
        return GatewayOrder(
            gateway_order_id=created["id"],
            amount=created["amount"],
            currency=created["currency"],
            receipt=created.get("receipt", receipt),
            notes=created.get("notes") or notes,
        )

    def sign(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        """Hex HMAC-SHA256 of ``order_id|payment_id`` under the key secret."""
        if not self._key_secret:
            raise GatewayConfigurationError("Payment configuration missing")
        message = f"{gateway_order_id}|{gateway_payment_id}".encode()
        return hmac.new(self._key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_payment_signature(self, confirmation: PaymentConfirmation) -> bool:
        expected = self.sign(confirmation.gateway_order_id, confirmation.gateway_payment_id)
        return secrets.compare_digest(expected.encode(), (confirmation.signature or "").encode())
