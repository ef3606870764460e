"""
Structured provider error exception types.

`ProviderError` is the only exception type the chat engine raises for call
failures. Two programmer-error types live beside it: `FieldConflictError` (a
``bad_request`` provider error raised before any network I/O) and
`BodyNotReplayableError` (a retry was needed but the body cannot be re-sent).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode

# Raw error bodies are truncated to this many bytes before being attached.
MAX_ERROR_BODY_BYTES = 64 * 1024


@dataclass
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Provider key where the error originated (e.g., ``"deepseek"``).
        model: Optional model name associated with the failure.
        retryable: Whether the executor may retry the attempt.
        http_status: HTTP status of the failed attempt (``0`` when none).
        provider_code: ``error.code`` from the provider envelope, stringified.
        provider_type: ``error.type`` from the provider envelope.
        request_id: Request id sent with the failing attempt.
        retry_after: Server-requested delay in seconds, when present.
        raw_body: Response body bytes, truncated to ``MAX_ERROR_BODY_BYTES``.
        cause: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str = ""
    model: Optional[str] = None
    retryable: bool = False
    http_status: int = 0
    provider_code: Optional[str] = None
    provider_type: Optional[str] = None
    request_id: Optional[str] = None
    retry_after: Optional[float] = None
    raw_body: Optional[bytes] = None
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if self.raw_body is not None and len(self.raw_body) > MAX_ERROR_BODY_BYTES:
            self.raw_body = self.raw_body[:MAX_ERROR_BODY_BYTES]

    def __str__(self) -> str:
        """Return a compact string combining provider, model, code, and message."""
        status = f" (http {self.http_status})" if self.http_status else ""
        return f"{self.provider or '-'}:{self.model or '-'} {self.code.value}{status}: {self.message}"


class FieldConflictError(ProviderError):
    """An ``extra`` key collides with a key produced by the standard mapping."""

    def __init__(self, key: str, provider: str = "", model: Optional[str] = None) -> None:
        super().__init__(
            code=ErrorCode.BAD_REQUEST,
            message=f"extra field {key!r} conflicts with a mapped request field",
            provider=provider,
            model=model,
            retryable=False,
        )
        self.key = key


class BodyNotReplayableError(RuntimeError):
    """A retry was required but the request body is one-shot and has no replay factory."""


__all__ = [
    "ProviderError",
    "FieldConflictError",
    "BodyNotReplayableError",
    "MAX_ERROR_BODY_BYTES",
]
