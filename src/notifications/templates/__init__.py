"""Email templates. Each renders a context dict to {"subject", "body"}."""

from notifications.templates.order_confirmation import OrderConfirmationTemplate

__all__ = ["OrderConfirmationTemplate"]
