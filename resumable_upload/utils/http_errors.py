"""HTTP helpers for extracting response bodies and error details."""

from __future__ import annotations

import json
from typing import Any


def parse_body(text: str) -> Any:
    """Return the JSON value encoded in ``text``, or ``text`` if it is not JSON."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def extract_error_detail(body: Any) -> str | None:
    """Extract a short error message from a parsed error response body.

    Google style APIs wrap errors as ``{"error": {"message": ...}}``; other
    servers return a plain string or a flat object.
    """
    if body is None or body == "":
        return None
    if not isinstance(body, dict):
        return str(body)

    detail_payload = body.get("error", body)
    if not isinstance(detail_payload, dict):
        return str(detail_payload)

    return detail_payload.get("message") or detail_payload.get("status")
