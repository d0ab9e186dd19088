"""Typed failures for order placement, payment settlement and the order lifecycle.

Each error carries the HTTP status the API layer answers with, so route code
never has to inspect message text to pick a response.
"""


class OrderingError(Exception):
    """Base class for every expected ordering failure."""

    status_code = 500

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class Unauthenticated(OrderingError):
    """No authenticated user accompanies the request."""

    status_code = 401


class InvalidRequest(OrderingError):
    """The request body is malformed or missing required data."""

    status_code = 400


class MinimumPurchaseNotMet(InvalidRequest):
    """A supplied coupon needs a larger subtotal than the cart has."""


class NotFound(OrderingError):
    """The referenced order does not exist or is not owned by the requester."""

    status_code = 404


class InvalidAddress(NotFound):
    """The delivery address does not exist or belongs to someone else."""

    status_code = 400


class Unavailable(OrderingError):
    """A product is inactive, a variant is unknown, or stock ran out."""

    status_code = 400


class CouponExhausted(Unavailable):
    """The coupon hit its usage limit before this order could redeem it."""


class InvalidSignature(OrderingError):
    """The payment confirmation did not come from the gateway."""

    status_code = 400


class InvalidTransition(OrderingError):
    """The order's current status does not allow the requested change."""

    status_code = 400


class CommitFailed(OrderingError):
    """The store failed while committing; nothing was written."""

    status_code = 500


class PaymentOrderFailed(OrderingError):
    """The payment gateway could not open an order to pay against."""

    status_code = 500
