"""Token bucket rate limiter shared across calls.

Slots are reserved under a lock so concurrent callers are serialized in
arrival order; each caller then waits for its own reservation outside the
lock, observing cancellation and the call deadline.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Protocol

from ..cancellation import CancellationToken, CancelledError
from ..timeouts import Deadline, DeadlineExceeded


class RateLimiter(Protocol):  # pragma: no cover - structural protocol
    def acquire(
        self,
        token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> None: ...


class TokenBucketRateLimiter:
    """Allow ``rate`` requests per second with bursts of up to ``burst``.

    Parameters:
        rate: Sustained requests per second (must be positive).
        burst: Bucket capacity.
        clock: Monotonic clock; injectable for tests.
        sleep: Blocking sleep used when no cancellation token is supplied.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be >= 1")
        self._interval = 1.0 / rate
        self._burst = burst
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._updated = clock()

    def _reserve(self) -> float:
        """Take one token (possibly going negative); return the wait in seconds."""
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._updated)
            self._tokens = min(float(self._burst), self._tokens + elapsed / self._interval)
            self._updated = now
            self._tokens -= 1.0
            if self._tokens >= 0:
                return 0.0
            return -self._tokens * self._interval

    def _release(self) -> None:
        with self._lock:
            self._tokens = min(float(self._burst), self._tokens + 1.0)

    def acquire(
        self,
        token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
    ) -> None:
        """Block until a slot is available.

        Raises:
            CancelledError: ``token`` was cancelled while waiting.
            DeadlineExceeded: the slot would only be available after ``deadline``.
        """
        if token is not None:
            token.raise_if_cancelled()
        wait = self._reserve()
        if wait <= 0:
            return
        if deadline is not None and wait > deadline.remaining():
            self._release()
            raise DeadlineExceeded("rate limiter wait exceeds deadline")
        if token is None:
            self._sleep(wait)
            return
        if token.wait(wait):
            self._release()
            raise CancelledError(token.reason or "operation cancelled")


__all__ = ["RateLimiter", "TokenBucketRateLimiter"]
