"""
Normalized provider error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the classifier, the retrying
executor and the stream. Values are lowercase snake_case and are considered a
stable public contract for logging and analytics.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    SERVER = "server"
    TIMEOUT = "timeout"
    CANCELED = "canceled"
    PARSE = "parse"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
