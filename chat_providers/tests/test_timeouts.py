"""Deadlines, timeout configuration and ``Retry-After`` parsing."""

from __future__ import annotations

from email.utils import format_datetime
from datetime import datetime, timezone

import pytest

from chat_providers.base.http import parse_retry_after
from chat_providers.base.timeouts import Deadline, DeadlineExceeded, earliest_deadline, get_timeout_config


class _Clock:
    def __init__(self, now: float = 50.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_deadline_remaining_and_expiry():
    clock = _Clock()
    d = Deadline.after(3.0, clock=clock)
    assert d.remaining() == pytest.approx(3.0)
    clock.now += 5
    assert d.remaining() == 0.0
    assert d.expired
    with pytest.raises(DeadlineExceeded):
        d.raise_if_expired()


def test_earliest_deadline_picks_minimum_and_ignores_non_positive():
    clock = _Clock()
    caller = Deadline(at=clock.now + 2.0, clock=clock)
    assert earliest_deadline(None, 0, -1, clock=clock) is None
    assert earliest_deadline(10.0, 5.0, clock=clock).at == pytest.approx(55.0)
    assert earliest_deadline(10.0, deadline=caller, clock=clock) is caller
    assert earliest_deadline(1.0, deadline=caller, clock=clock).at == pytest.approx(51.0)


def test_timeout_config_env_overrides(monkeypatch):
    monkeypatch.setenv("PT_TIMEOUT_HTTP_SECONDS", "12.5")
    monkeypatch.setenv("PT_TIMEOUT_STREAM_SECONDS", "-3")
    cfg = get_timeout_config()
    assert cfg.http_timeout_seconds == 12.5
    assert cfg.stream_timeout_seconds == 60.0
    monkeypatch.setenv("PT_TIMEOUT_HTTP_SECONDS", "not-a-number")
    assert get_timeout_config().http_timeout_seconds == 30.0


@pytest.mark.parametrize("value,expected", [("5", 5.0), (" 0 ", 0.0), ("", None), (None, None), ("soon", None)])
def test_parse_retry_after_seconds(value, expected):
    assert parse_retry_after(value) == expected


def test_parse_retry_after_http_date():
    now = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc).timestamp()
    future = format_datetime(datetime(2024, 5, 1, 12, 0, 30, tzinfo=timezone.utc), usegmt=True)
    past = format_datetime(datetime(2024, 5, 1, 11, 0, 0, tzinfo=timezone.utc), usegmt=True)
    assert parse_retry_after(future, now=lambda: now) == pytest.approx(30.0)
    assert parse_retry_after(past, now=lambda: now) == 0.0
