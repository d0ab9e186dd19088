"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations. The adapter
is chosen by the PAYMENT_GATEWAY environment variable (default: razorpay).
"""

import os

from payments.gateway.port import PaymentGateway
from payments.gateway.razorpay_adapter import RazorpayGateway

_ADAPTERS = {
    "razorpay": RazorpayGateway,
}

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it from the environment on first use."""
    global _current_gateway
    if _current_gateway is None:
        adapter = os.environ.get("PAYMENT_GATEWAY", "razorpay").lower()
        if adapter not in _ADAPTERS:
            raise ValueError(f"Unknown payment gateway: {adapter}")
        _current_gateway = _ADAPTERS[adapter]()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
