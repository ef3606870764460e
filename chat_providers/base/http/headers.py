"""Header helpers shared by the executor and the error classifier.

``Retry-After`` parsing accepts both forms allowed by RFC 9110: a
non-negative delta in seconds or an HTTP-date. Request ids are 16 random
bytes rendered as 32 lowercase hex characters.
"""

from __future__ import annotations

import time
import uuid
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Mapping, Optional

REQUEST_ID_HEADER = "X-Request-ID"
IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"
RETRY_AFTER_HEADER = "Retry-After"

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def new_request_id() -> str:
    """Return a fresh request id (``uuid4().hex``)."""
    return uuid.uuid4().hex


def get_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """Case-insensitive header lookup over a plain mapping."""
    if not headers:
        return None
    getter = getattr(headers, "get", None)
    value = getter(name) if getter is not None else None
    if value is not None:
        return value
    lowered = name.lower()
    for key, val in headers.items():
        if key.lower() == lowered:
            return val
    return None


def parse_retry_after(value: Optional[str], *, now: Callable[[], float] = time.time) -> Optional[float]:
    """Parse a ``Retry-After`` header value into seconds.

    Returns ``None`` for missing or unparseable values. HTTP-dates in the past
    yield ``0.0``.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.isdigit():
        return float(int(value))
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, when.timestamp() - now())


__all__ = [
    "REQUEST_ID_HEADER",
    "IDEMPOTENCY_KEY_HEADER",
    "RETRY_AFTER_HEADER",
    "MUTATING_METHODS",
    "new_request_id",
    "get_header",
    "parse_retry_after",
]
