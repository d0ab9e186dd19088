"""Payment gateway port (abstract interface).

Defines the contract a payment gateway adapter implements for settling
online orders: opening a gateway order the customer pays against, and
checking the signed confirmation the gateway hands back. Checkout code only
talks to this interface, so the gateway can be swapped without touching the
ordering domain.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentConfirmation:
    """What the client relays from the gateway's checkout redirect."""

    gateway_order_id: str
    gateway_payment_id: str
    signature: str


@dataclass(frozen=True)
class GatewayOrder:
    """A payable order opened at the gateway. `amount` is in the currency's minor unit."""

    gateway_order_id: str
    amount: int
    currency: str
    receipt: str | None = None
    notes: dict = field(default_factory=dict)


class GatewayConfigurationError(RuntimeError):
    """The gateway cannot be used because its keys are not configured."""


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    name: str = ""

    @abstractmethod
    def create_payment_order(self, amount: float, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        """Open a gateway order for `amount` (major units) that the customer then pays."""
        ...

    @abstractmethod
    def verify_payment_signature(self, confirmation: PaymentConfirmation) -> bool:
        """Return True only when the confirmation was signed by the gateway."""
        ...

    @property
    def public_key(self) -> str | None:
        """Key the browser checkout widget is opened with, if the gateway has one."""
        return None
