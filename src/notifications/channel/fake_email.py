"""Fake email adapter — keeps sent emails in memory for test assertions."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.outbox: list[dict] = []
        self.error: Exception | None = None

    def fail_with(self, error: Exception | None):
        """Make every following send() raise `error` (None restores delivery)."""
        self.error = error

    def send(self, to: str, subject: str, body: str) -> dict:
        if self.error is not None:
            raise self.error

        message_id = f"email-{uuid4().hex[:12]}"
        self.outbox.append({"message_id": message_id, "to": to, "subject": subject, "body": body})
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.outbox.clear()
        self.error = None
