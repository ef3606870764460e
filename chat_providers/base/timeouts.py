"""Unified timeout and deadline utilities for the chat engine.

This module centralizes timeout values used by the HTTP transport and the
retrying executor, and the `Deadline` type used to compose the per-call
timeout, the client-wide timeout and a caller-supplied deadline into a single
instant. Every attempt's timeout is the remaining time of that instant.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use only. Supported environment variables (all optional):
        PT_TIMEOUT_START_SECONDS
        PT_TIMEOUT_STREAM_SECONDS
        PT_TIMEOUT_HTTP_SECONDS
        PT_TIMEOUT_OVERALL_SECONDS

Deadline / earliest_deadline()
    Monotonic-clock instants and their composition.

DeadlineExceeded
    Raised when a caller deadline (or the composed call budget) has passed.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
import time
from typing import Callable, Optional

Clock = Callable[[], float]


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        start_timeout_seconds: Timeout for connecting and receiving response
            headers of a streaming call.
        stream_timeout_seconds: Idle timeout while waiting for the next chunk
            during streaming.
        http_timeout_seconds: Baseline whole-call timeout for non-streaming
            requests when the client has none configured.
        overall_timeout_seconds: Optional absolute cap for an end-to-end call.
    """

    start_timeout_seconds: float = 30.0
    stream_timeout_seconds: float = 60.0
    http_timeout_seconds: float = 30.0
    overall_timeout_seconds: float | None = None


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None

_ENV_KEYS = (
    "PT_TIMEOUT_START_SECONDS",
    "PT_TIMEOUT_STREAM_SECONDS",
    "PT_TIMEOUT_HTTP_SECONDS",
    "PT_TIMEOUT_OVERALL_SECONDS",
)


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse an environment variable as a positive float, else ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return process-cached `TimeoutConfig` instance.

    The cache is refreshed when any ``PT_TIMEOUT_*`` variable changes so tests
    can adjust values at runtime with ``monkeypatch.setenv``.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - intentional, documented module cache
    cur_guard = "/".join(os.getenv(k, "") for k in _ENV_KEYS)
    if _CACHED is not None and _ENV_GUARD == cur_guard:
        return _CACHED

    start = _parse_env_float("PT_TIMEOUT_START_SECONDS", 30.0)
    stream = _parse_env_float("PT_TIMEOUT_STREAM_SECONDS", 60.0)
    http = _parse_env_float("PT_TIMEOUT_HTTP_SECONDS", 30.0)
    overall = _parse_env_float("PT_TIMEOUT_OVERALL_SECONDS", None)

    _CACHED = TimeoutConfig(
        start_timeout_seconds=float(start),
        stream_timeout_seconds=float(stream),
        http_timeout_seconds=float(http),
        overall_timeout_seconds=float(overall) if overall is not None else None,
    )
    _ENV_GUARD = cur_guard
    return _CACHED


class DeadlineExceeded(TimeoutError):
    """The call budget (caller deadline or composed timeout) has elapsed."""


@dataclass(frozen=True)
class Deadline:
    """An absolute instant on the monotonic clock.

    Attributes:
        at: ``time.monotonic()`` value at which the deadline expires.
        clock: Clock used for ``remaining``; injectable for tests.
    """

    at: float
    clock: Clock = time.monotonic

    @classmethod
    def after(cls, seconds: float, clock: Clock = time.monotonic) -> "Deadline":
        return cls(at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.at - self.clock())

    @property
    def expired(self) -> bool:
        return self.clock() >= self.at

    def raise_if_expired(self) -> None:
        if self.expired:
            raise DeadlineExceeded("deadline exceeded")


def earliest_deadline(
    *timeouts: Optional[float],
    deadline: Optional[Deadline] = None,
    clock: Clock = time.monotonic,
) -> Optional[Deadline]:
    """Compose relative timeouts and an absolute deadline into the earliest one.

    Non-positive and ``None`` timeouts are ignored. Returns ``None`` when
    nothing bounds the call.
    """
    now = clock()
    earliest: Optional[Deadline] = None
    for seconds in timeouts:
        if seconds is None or seconds <= 0:
            continue
        candidate = Deadline(at=now + seconds, clock=clock)
        if earliest is None or candidate.at < earliest.at:
            earliest = candidate
    if deadline is not None and (earliest is None or deadline.at < earliest.at):
        earliest = deadline
    return earliest


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "Deadline",
    "DeadlineExceeded",
    "earliest_deadline",
]
