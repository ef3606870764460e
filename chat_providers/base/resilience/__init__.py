"""Resilience primitives: retry policy, rate limiting and the retrying executor."""

from .error_handling import with_error_handling
from .executor import RetryingExecutor
from .rate_limit import RateLimiter, TokenBucketRateLimiter
from .retry import (
    DEFAULT_RETRY_CONFIG,
    NO_RETRY,
    Backoff,
    ExponentialBackoff,
    RetryConfig,
    Sleeper,
    cancellable_sleep,
)

__all__ = [
    "with_error_handling",
    "RetryingExecutor",
    "RateLimiter",
    "TokenBucketRateLimiter",
    "DEFAULT_RETRY_CONFIG",
    "NO_RETRY",
    "Backoff",
    "ExponentialBackoff",
    "RetryConfig",
    "Sleeper",
    "cancellable_sleep",
]
