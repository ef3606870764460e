"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chat_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import (
    MAX_ERROR_BODY_BYTES,
    BodyNotReplayableError,
    FieldConflictError,
    ProviderError,
)
from .classification import (
    classify_status,
    error_from_exception,
    error_from_response,
    parse_error_envelope,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "FieldConflictError",
    "BodyNotReplayableError",
    "MAX_ERROR_BODY_BYTES",
    "classify_status",
    "parse_error_envelope",
    "error_from_response",
    "error_from_exception",
]
