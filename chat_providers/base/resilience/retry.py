"""Retry policy for HTTP attempts.

`RetryConfig` decides which attempts may be retried and how long to wait
between them; the retrying executor applies it. Backoff is exponential with a
cap and symmetric jitter, drawn from an instance-owned ``random.Random`` so
tests can seed it.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Optional, Protocol

from ..cancellation import CancellationToken, CancelledError

DEFAULT_RETRY_STATUSES: FrozenSet[int] = frozenset({408, 429, 500, 502, 503, 504})

# Statuses for which a Retry-After header replaces the computed backoff.
RETRY_AFTER_STATUSES: FrozenSet[int] = frozenset({429, 503})


class Backoff(Protocol):  # pragma: no cover - structural protocol
    def next(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        ...


@dataclass
class ExponentialBackoff:
    """``base * 2**(attempt-1)`` capped at ``max_delay``, then scaled by ``1 ± jitter``."""

    base: float = 0.2
    max_delay: float = 3.0
    jitter: float = 0.2
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def next(self, attempt: int) -> float:
        attempt = max(1, attempt)
        base = self.base if self.base > 0 else 0.2
        cap = self.max_delay if self.max_delay > 0 else 3.0
        delay = min(cap, base * (2 ** min(attempt - 1, 32)))
        jitter = min(max(self.jitter, 0.0), 1.0)
        if jitter == 0:
            return delay
        factor = 1 + (self.rng.random() * 2 - 1) * jitter
        return delay * max(factor, 0.0)


class Sleeper(Protocol):  # pragma: no cover - structural protocol
    def __call__(self, seconds: float, token: Optional[CancellationToken]) -> None: ...


def cancellable_sleep(seconds: float, token: Optional[CancellationToken] = None) -> None:
    """Default sleeper: wait ``seconds`` unless ``token`` is cancelled first."""
    if seconds <= 0:
        if token is not None:
            token.raise_if_cancelled()
        return
    if token is None:
        time.sleep(seconds)
        return
    if token.wait(seconds):
        raise CancelledError(token.reason or "operation cancelled")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy.

    Attributes:
        max_attempts: Total attempts including the first; ``<= 1`` disables retries.
        retry_statuses: HTTP statuses eligible for retry.
        backoff: Delay policy between attempts.
        respect_retry_after: Honour ``Retry-After`` on 429/503 responses.
        max_retry_after: Cap applied to ``Retry-After`` (seconds).
        max_elapsed: Optional budget for all attempts plus sleeps (seconds).
    """

    max_attempts: int = 3
    retry_statuses: FrozenSet[int] = DEFAULT_RETRY_STATUSES
    backoff: Backoff = field(default_factory=ExponentialBackoff)
    respect_retry_after: bool = True
    max_retry_after: float = 30.0
    max_elapsed: Optional[float] = None

    def can_retry_status(self, status: int) -> bool:
        return status in self.retry_statuses

    def delay_for(self, attempt: int, status: int, retry_after: Optional[float]) -> float:
        """Delay before the attempt following ``attempt``."""
        if self.respect_retry_after and retry_after is not None and status in RETRY_AFTER_STATUSES:
            return min(retry_after, self.max_retry_after) if self.max_retry_after > 0 else retry_after
        return self.backoff.next(attempt)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], *, rng: Optional[random.Random] = None) -> "RetryConfig":
        """Build a config from a ``retry`` configuration section."""
        data = dict(data or {})
        backoff = ExponentialBackoff(
            base=float(data.get("backoff_base", 0.2)),
            max_delay=float(data.get("backoff_max", 3.0)),
            jitter=float(data.get("jitter", 0.2)),
            rng=rng or random.Random(),
        )
        statuses = data.get("retry_statuses")
        max_elapsed = data.get("max_elapsed")
        return cls(
            max_attempts=int(data.get("max_attempts", 3)),
            retry_statuses=frozenset(int(s) for s in statuses) if statuses else DEFAULT_RETRY_STATUSES,
            backoff=backoff,
            respect_retry_after=bool(data.get("respect_retry_after", True)),
            max_retry_after=float(data.get("max_retry_after", 30.0)),
            max_elapsed=float(max_elapsed) if max_elapsed is not None else None,
        )


DEFAULT_RETRY_CONFIG = RetryConfig()

NO_RETRY = RetryConfig(max_attempts=1)


__all__ = [
    "Backoff",
    "ExponentialBackoff",
    "Sleeper",
    "cancellable_sleep",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "DEFAULT_RETRY_STATUSES",
    "NO_RETRY",
]
