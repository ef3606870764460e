"""Unified provider error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``chat_providers.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import (
    MAX_ERROR_BODY_BYTES,
    BodyNotReplayableError,
    FieldConflictError,
    ProviderError,
)
from .errors_parts.classification import (
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
