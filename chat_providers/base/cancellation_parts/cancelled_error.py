"""Cancellation error type.

Defines the public ``CancelledError`` raised when a ``CancellationToken`` is
observed as cancelled. The error classifier maps it to the ``canceled`` code,
which is never retried.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively."""

__all__ = ["CancelledError"]
