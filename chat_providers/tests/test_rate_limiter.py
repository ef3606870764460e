from __future__ import annotations

import pytest

from chat_providers.base.cancellation import CancellationToken, CancelledError
from chat_providers.base.resilience import TokenBucketRateLimiter
from chat_providers.base.timeouts import Deadline, DeadlineExceeded


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0
        self.slept = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
        self.now += seconds


def test_burst_is_free_then_paced():
    clock = _Clock()
    limiter = TokenBucketRateLimiter(rate=2.0, burst=2, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    limiter.acquire()
    assert clock.slept == []
    limiter.acquire()
    assert clock.slept == [pytest.approx(0.5)]


def test_tokens_refill_over_time():
    clock = _Clock()
    limiter = TokenBucketRateLimiter(rate=1.0, burst=1, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    clock.now += 1.0
    limiter.acquire()
    assert clock.slept == []


def test_wait_beyond_deadline_raises_without_consuming():
    clock = _Clock()
    limiter = TokenBucketRateLimiter(rate=1.0, burst=1, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    with pytest.raises(DeadlineExceeded):
        limiter.acquire(deadline=Deadline(at=0.5, clock=clock))
    clock.now += 1.0
    limiter.acquire()
    assert clock.slept == []


def test_cancelled_token_fails_fast():
    token = CancellationToken()
    token.cancel("stop")
    limiter = TokenBucketRateLimiter(rate=1.0)
    with pytest.raises(CancelledError):
        limiter.acquire(token=token)


class _WakesCancelled(CancellationToken):
    """Passes the pre-check but reports cancellation from ``wait``."""

    def raise_if_cancelled(self) -> None:
        return None

    def wait(self, timeout=None) -> bool:
        return True


def test_cancel_while_waiting_releases_reservation():
    clock = _Clock()
    limiter = TokenBucketRateLimiter(rate=1.0, burst=1, clock=clock, sleep=clock.sleep)
    limiter.acquire()
    with pytest.raises(CancelledError):
        limiter.acquire(token=_WakesCancelled())
    clock.now += 1.0
    limiter.acquire()
    assert clock.slept == []


@pytest.mark.parametrize("rate,burst", [(0, 1), (-1, 1), (1, 0)])
def test_invalid_parameters(rate, burst):
    with pytest.raises(ValueError):
        TokenBucketRateLimiter(rate=rate, burst=burst)
