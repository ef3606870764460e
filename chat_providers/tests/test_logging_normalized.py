"""Focused tests for chat_providers.base.logging and the events the client emits.

Covers:
- _parse_level string parsing
- normalized_log_event emits required keys and token coercion
- JsonFormatter hoisting
- chat / retry / stream lifecycle events, without secrets
"""
from __future__ import annotations

import json
import logging
from typing import Iterator, List

import httpx
import pytest

from chat_providers.base.errors import ProviderError
from chat_providers.base.log_support import JsonFormatter, LogContext
from chat_providers.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    normalized_log_event,
)
from chat_providers.base.models import ChatRequest, Message, Usage
from chat_providers.tests.helpers import chunk, completion, sse_body


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())

    def events(self) -> List[dict]:
        return [json.loads(m) for m in self.messages]


@pytest.fixture()
def captured() -> Iterator[tuple]:
    logger = logging.getLogger("chat_providers.tests.events")
    logger.setLevel(logging.DEBUG)
    handler = _ListHandler()
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO
    assert _parse_level("debug") == logging.DEBUG
    assert _parse_level("WARN") == logging.WARNING
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR


def test_normalized_log_event_emits_required_keys(captured):
    logger, handler = captured
    ctx = LogContext(provider="p", model="m", request_id="r1")
    normalized_log_event(
        logger,
        "stream.end",
        ctx,
        phase="finalize",
        error_code="timeout",
        emitted=True,
        tokens=Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        response_id="resp-1",
    )
    payload = handler.events()[-1]
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in payload
    assert payload["event"] == "stream.end"
    assert payload["request_id"] == "r1"
    assert payload["tokens"]["total_tokens"] == 15
    assert payload["response_id"] == "resp-1"


def test_error_code_omitted_and_extras_never_override(captured):
    logger, handler = captured
    normalized_log_event(logger, "x", None, phase="start", tokens=[("a", 1)], response_id=None)
    payload = handler.events()[-1]
    assert "error_code" not in payload
    assert payload["tokens"] == {"a": 1}
    assert "response_id" not in payload


def test_json_formatter_hoists_json_message():
    formatter = JsonFormatter()
    record = logging.LogRecord("chat_providers.x", logging.INFO, __file__, 1, '{"event": "chat.end", "phase": "finalize"}', None, None)
    data = json.loads(formatter.format(record))
    assert data["event"] == "chat.end"
    assert data["level"] == "INFO"
    assert "msg" not in data

    plain = logging.LogRecord("chat_providers.x", logging.WARNING, __file__, 1, "hello %s", ("there",), None)
    assert json.loads(formatter.format(plain))["msg"] == "hello there"


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("CHAT_PROVIDERS_LOG_LEVEL", "ERROR")
    assert get_logger().level == logging.ERROR
    monkeypatch.setenv("CHAT_PROVIDERS_LOG_LEVEL", "INFO")
    assert get_logger().level == logging.INFO


def test_configure_logger_file_handler(tmp_path):
    path = tmp_path / "logs" / "chat.log"
    logger = configure_logger(file_path=str(path))
    try:
        logger.warning('{"event": "marker"}')
        for h in logger.handlers:
            h.flush()
        assert json.loads(path.read_text(encoding="utf-8").splitlines()[-1])["event"] == "marker"
    finally:
        configure_logger(file_path=None)
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)


def _req() -> ChatRequest:
    return ChatRequest(model="", messages=[Message.user("hi")])


def test_chat_lifecycle_events_and_no_secrets(make_client, captured):
    logger, handler = captured
    statuses = iter([503, 200])

    def handler_fn(request):
        if next(statuses) == 503:
            return httpx.Response(503)
        return httpx.Response(200, json=completion(usage={"prompt_tokens": 1, "completion_tokens": 1}))

    make_client(handler_fn, logger=logger).chat(_req())
    events = handler.events()
    assert [e["event"] for e in events] == ["chat.start", "retry.attempt", "chat.end"]
    retry = events[1]
    assert retry["attempt"] == 1 and retry["retrying"] is True and retry["http_status"] == 503
    assert retry["error_code"] == "server"
    assert events[2]["tokens"]["total_tokens"] == 2
    assert all(e["provider"] == "test" and e["request_id"] for e in events)
    assert not any("sk-live-123" in m for m in handler.messages)


def test_stream_events_end_and_close(make_client, captured):
    logger, handler = captured
    body = sse_body(chunk({"content": "a"}), chunk({"content": "b"}))
    client = make_client(lambda r: httpx.Response(200, content=body), logger=logger)

    client.stream_chat(_req()).collect()
    assert [e["event"] for e in handler.events()] == ["stream.start", "stream.end"]

    handler.messages.clear()
    stream = client.stream_chat(_req())
    stream.recv()
    stream.close()
    events = handler.events()
    assert [e["event"] for e in events] == ["stream.start", "stream.closed"]
    assert events[-1]["emitted"] is True


def test_stream_error_event(make_client, captured):
    logger, handler = captured
    body = sse_body({"error": {"message": "boom"}})
    with pytest.raises(ProviderError):
        make_client(lambda r: httpx.Response(200, content=body), logger=logger).stream_chat(_req()).collect()
    last = handler.events()[-1]
    assert last["event"] == "stream.error"
    assert last["error_code"] == "server"
