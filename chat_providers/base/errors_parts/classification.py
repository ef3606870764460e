"""
Error classification mapping HTTP outcomes and exceptions to `ProviderError`.

Status codes map onto the closed `ErrorCode` set with a retryable hint;
provider error envelopes (``{"error": {"message", "type", "code"}}``) are
parsed for the human message and provider-specific identifiers. Exceptions
that carry an HTTP status (``httpx.HTTPStatusError`` raised from a hook, for
instance) are classified by that status.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from ..cancellation_parts.cancelled_error import CancelledError
from ..http.headers import RETRY_AFTER_HEADER, get_header, parse_retry_after
from ..timeouts import DeadlineExceeded
from .error_code import ErrorCode
from .provider_error import MAX_ERROR_BODY_BYTES, ProviderError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, Tuple[ErrorCode, bool]] = {
    400: (ErrorCode.BAD_REQUEST, False),
    401: (ErrorCode.AUTH, False),
    403: (ErrorCode.AUTH, False),
    404: (ErrorCode.NOT_FOUND, False),
    408: (ErrorCode.TIMEOUT, True),
    429: (ErrorCode.RATE_LIMIT, True),
}


def classify_status(status: int) -> Tuple[ErrorCode, bool]:
    """Map an HTTP status to ``(code, retryable)``.

    Statuses outside the known table classify as ``unknown`` and are treated
    as retryable; whether the executor actually retries is still decided by
    its status allow-list.
    """
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER, True
    return ErrorCode.UNKNOWN, True


def _stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(int(value)) if float(value).is_integer() else str(value)
    return json.dumps(value, ensure_ascii=False)


def parse_error_envelope(body: bytes | str | Mapping[str, Any] | None) -> Tuple[str, Optional[str], Optional[str]]:
    """Extract ``(message, type, code)`` from a provider error body.

    Accepts ``{"error": {...}}``, ``{"error": "text"}``, a top-level
    ``{"message": ...}`` object, or anything else (the raw text becomes the
    message). ``code`` is always stringified because providers disagree on
    whether it is a number or a string.
    """
    if body is None:
        return "", None, None
    payload: Any
    text = ""
    if isinstance(body, Mapping):
        payload = body
    else:
        text = body.decode("utf-8", errors="replace") if isinstance(body, (bytes, bytearray)) else str(body)
        try:
            payload = json.loads(text) if text.strip() else None
        except ValueError:
            payload = None
    if not isinstance(payload, Mapping):
        return text.strip(), None, None
    err = payload.get("error")
    if isinstance(err, str):
        return err, None, None
    if isinstance(err, Mapping):
        message = err.get("message")
        return (
            message if isinstance(message, str) else text.strip(),
            _stringify(err.get("type")),
            _stringify(err.get("code")),
        )
    message = payload.get("message")
    if isinstance(message, str):
        return message, _stringify(payload.get("type")), _stringify(payload.get("code"))
    return text.strip(), None, None


def error_from_response(
    status: int,
    body: bytes | None,
    headers: Optional[Mapping[str, str]] = None,
    *,
    provider: str = "",
    model: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ProviderError:
    """Build a classified `ProviderError` for a non-2xx HTTP response."""
    code, retryable = classify_status(status)
    raw = body[:MAX_ERROR_BODY_BYTES] if body else body
    message, provider_type, provider_code = parse_error_envelope(raw)
    return ProviderError(
        code=code,
        message=message or f"http status {status}",
        provider=provider,
        model=model,
        retryable=retryable,
        http_status=status,
        provider_code=provider_code,
        provider_type=provider_type,
        request_id=request_id,
        retry_after=parse_retry_after(get_header(headers, RETRY_AFTER_HEADER)),
        raw_body=raw,
    )


def error_from_exception(
    exc: BaseException,
    *,
    provider: str = "",
    model: Optional[str] = None,
    request_id: Optional[str] = None,
    raw_body: Optional[bytes] = None,
) -> ProviderError:
    """Classify a non-HTTP failure.

    - `ProviderError` passes through (filling in missing context).
    - `CancelledError` -> ``canceled``, never retryable.
    - `DeadlineExceeded` (caller deadline) -> ``timeout``, not retryable.
    - Transport timeouts -> ``timeout``, retryable.
    - JSON decode failures -> ``parse``, never retryable.
    - Exceptions carrying an HTTP status -> `classify_status`.
    - Anything else -> ``unknown``, retryable.
    """
    if isinstance(exc, ProviderError):
        exc.provider = exc.provider or provider
        exc.model = exc.model or model
        exc.request_id = exc.request_id or request_id
        return exc
    status = _extract_status(exc)
    if isinstance(exc, CancelledError):
        code, retryable = ErrorCode.CANCELED, False
    elif isinstance(exc, DeadlineExceeded):
        code, retryable = ErrorCode.TIMEOUT, False
    elif isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        code, retryable = ErrorCode.TIMEOUT, True
    elif isinstance(exc, (json.JSONDecodeError, UnicodeDecodeError)):
        code, retryable = ErrorCode.PARSE, False
    elif status is not None:
        code, retryable = classify_status(status)
    else:
        code, retryable = ErrorCode.UNKNOWN, True
    return ProviderError(
        code=code,
        message=str(exc) or type(exc).__name__,
        provider=provider,
        model=model,
        retryable=retryable,
        http_status=status or 0,
        request_id=request_id,
        raw_body=raw_body,
        cause=exc,
    )


__all__ = [
    "classify_status",
    "parse_error_envelope",
    "error_from_response",
    "error_from_exception",
]
