"""Response error extraction for load test observability.

Parses ordering API error responses into human-readable messages. Every
handled failure has the shape {"error": "msg"}; Protean validation errors may
carry a field map instead of a string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body, dict) and "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        return str(error)

    return str(body)[:300]


def is_stock_rejection(response: Response) -> bool:
    """True for the 400s a sold-out product legitimately produces under contention."""
    if response.status_code != 400:
        return False
    detail = extract_error_detail(response)
    return detail.startswith("Insufficient stock") or "no longer available" in detail
