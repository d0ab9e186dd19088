"""Email channel registry.

Provides singleton access to the email adapter selected by the
EMAIL_ADAPTER environment variable. Only the in-memory fake ships here; a
real provider adapter registers under its own name.
"""

import os

from notifications.channel.email_port import EmailPort
from notifications.channel.fake_email import FakeEmailAdapter

_ADAPTERS = {
    "fake": FakeEmailAdapter,
}

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        adapter = os.environ.get("EMAIL_ADAPTER", "fake").lower()
        if adapter not in _ADAPTERS:
            raise ValueError(f"Unknown email adapter: {adapter}")
        _email_channel = _ADAPTERS[adapter]()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
