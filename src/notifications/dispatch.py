"""Best-effort email dispatch.

Sending happens after the order is committed. A failure here is logged and
reported to the caller as False; it never propagates.
"""

import structlog

from notifications.channel import get_email_channel
from notifications.templates import OrderConfirmationTemplate

logger = structlog.get_logger(__name__)


def send_order_confirmation(to: str | None, context: dict) -> bool:
    """Email the order confirmation to `to`. Returns True when the adapter accepted it."""
    if not to:
        logger.info("order_email_skipped", order_number=context.get("order_number"), reason="no recipient")
        return False

    content = OrderConfirmationTemplate.render(context)
    try:
        result = get_email_channel().send(to=to, subject=content["subject"], body=content["body"])
    except Exception as exc:
        logger.error(
            "order_email_failed",
            order_number=context.get("order_number"),
            error=str(exc),
            exc_info=True,
        )
        return False

    if result.get("status") != "sent":
        logger.error("order_email_failed", order_number=context.get("order_number"), error=result.get("error"))
        return False

    logger.info("order_email_sent", order_number=context.get("order_number"), message_id=result.get("message_id"))
    return True
