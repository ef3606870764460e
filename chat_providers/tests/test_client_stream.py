"""Streaming calls: event order, tool-call assembly, errors, early close, cancellation and deadlines."""

from __future__ import annotations

import json
from typing import Iterator, List

import httpx
import pytest

from chat_providers.base.cancellation import CancellationToken
from chat_providers.base.errors import ErrorCode, ProviderError
from chat_providers.base.models import (
    CallOptions,
    ChatRequest,
    FinishReason,
    Message,
    StreamEventKind,
    StreamOptions,
)
from chat_providers.base.streaming import ChatStream
from chat_providers.base.timeouts import Deadline
from chat_providers.openai_compat import map_chunk
from chat_providers.tests.helpers import chunk, sse_body


def _req(**kwargs) -> ChatRequest:
    return ChatRequest(model="", messages=[Message.user("hi")], **kwargs)


def _sse(body: bytes, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=body, headers={"content-type": "text/event-stream"})

    return handler


def test_stream_text_and_usage(make_client):
    seen = []
    body = sse_body(
        chunk({"role": "assistant"}),
        chunk({"reasoning_content": "thinking"}),
        chunk({"content": "Hel"}),
        chunk({"content": "lo"}),
        chunk({}, finish_reason="stop"),
        {"id": "chatcmpl-s1", "choices": [], "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}},
    )

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=body)

    stream = make_client(handler).stream_chat(_req(stream_options=StreamOptions(include_usage=True)))
    events = list(stream)
    kinds = [e.kind for e in events]
    assert kinds == [
        StreamEventKind.PART_DELTA,
        StreamEventKind.PART_DELTA,
        StreamEventKind.PART_DELTA,
        StreamEventKind.CHOICE_DONE,
        StreamEventKind.USAGE,
        StreamEventKind.DONE,
    ]
    resp = stream.response()
    assert resp.first_text() == "Hello"
    assert resp.first_reasoning() == "thinking"
    assert resp.usage.total_tokens == 5
    assert resp.id == "chatcmpl-s1"
    assert resp.choices[0].finish_reason is FinishReason.STOP

    sent = json.loads(seen[0].content)
    assert sent["stream"] is True
    assert sent["stream_options"] == {"include_usage": True}
    assert seen[0].headers["Accept"] == "text/event-stream"


def test_stream_tool_calls_are_assembled(make_client):
    body = sse_body(
        chunk({"tool_calls": [{"index": 0, "id": "call_a", "type": "function", "function": {"name": "weather", "arguments": ""}}]}),
        chunk({"tool_calls": [{"index": 0, "function": {"arguments": '{"city": '}}]}),
        chunk({"tool_calls": [{"index": 1, "id": "call_b", "function": {"name": "time", "arguments": "{}"}}]}),
        chunk({"tool_calls": [{"index": 0, "function": {"arguments": '"Oslo"}'}}]}),
        chunk({}, finish_reason="tool_calls"),
    )
    resp = make_client(_sse(body)).stream_chat(_req()).collect()
    calls = resp.tool_calls()
    assert [(c.id, c.name) for c in calls] == [("call_a", "weather"), ("call_b", "time")]
    assert calls[0].arguments == {"city": "Oslo"}
    assert calls[1].arguments == {}
    assert resp.choices[0].finish_reason is FinishReason.TOOL_CALLS


def test_eof_without_done_sentinel_ends_normally(make_client):
    body = sse_body(chunk({"content": "partial"}), done=False)
    stream = make_client(_sse(body)).stream_chat(_req())
    events = list(stream)
    assert events[-1].kind is StreamEventKind.DONE
    assert stream.response().first_text() == "partial"


def test_comments_and_keepalives_are_skipped(make_client):
    body = b": ping\n\n" + sse_body(chunk({"content": "x"}))
    assert make_client(_sse(body)).stream_chat(_req()).collect().first_text() == "x"


def test_error_chunk_raises_after_earlier_events(make_client):
    body = sse_body(chunk({"content": "par"}), {"error": {"message": "overloaded", "type": "server_error"}})
    stream = make_client(_sse(body)).stream_chat(_req())
    first = stream.recv()
    assert first.text == "par"
    with pytest.raises(ProviderError) as ei:
        stream.recv()
    assert ei.value.code is ErrorCode.SERVER
    assert ei.value.message == "overloaded"
    assert stream.recv() is None
    assert stream.response().first_text() == "par"


def test_malformed_chunk_is_parse_error(make_client):
    body = b"data: {not json\n\n"
    with pytest.raises(ProviderError) as ei:
        make_client(_sse(body)).stream_chat(_req()).collect()
    assert ei.value.code is ErrorCode.PARSE


def test_open_failure_is_classified_and_retried(make_client, recording_sleeper):
    statuses = iter([429, 200])

    def handler(request):
        status = next(statuses)
        if status == 429:
            return httpx.Response(429, json={"error": {"message": "slow"}}, headers={"Retry-After": "1"})
        return httpx.Response(200, content=sse_body(chunk({"content": "ok"})))

    resp = make_client(handler).stream_chat(_req()).collect()
    assert resp.first_text() == "ok"
    assert recording_sleeper.delays == [1.0]


def test_open_auth_failure_raises_from_stream_chat(make_client):
    client = make_client(_sse(b'{"error": {"message": "bad key"}}', status=401))
    with pytest.raises(ProviderError) as ei:
        client.stream_chat(_req())
    assert ei.value.code is ErrorCode.AUTH
    assert ei.value.message == "bad key"


def test_close_early_ends_iteration_without_error(make_client):
    body = sse_body(*(chunk({"content": str(i)}) for i in range(5)))
    stream = make_client(_sse(body)).stream_chat(_req())
    assert stream.recv().text == "0"
    stream.close()
    stream.close()
    assert stream.recv() is None
    assert list(stream) == []
    assert stream.response().first_text() == "0"


def test_context_manager_closes(make_client):
    body = sse_body(chunk({"content": "a"}), chunk({"content": "b"}))
    with make_client(_sse(body)).stream_chat(_req()) as stream:
        next(iter(stream))
    assert stream.recv() is None


def test_cancellation_between_reads(make_client):
    token = CancellationToken()
    body = sse_body(chunk({"content": "a"}), chunk({"content": "b"}))
    stream = make_client(_sse(body)).stream_chat(_req(), CallOptions(cancellation_token=token))
    assert stream.recv().text == "a"
    token.cancel("user pressed stop")
    with pytest.raises(ProviderError) as ei:
        stream.recv()
    assert ei.value.code is ErrorCode.CANCELED
    assert ei.value.message == "user pressed stop"
    assert ei.value.retryable is False


def test_cancelled_before_open_sends_nothing(make_client):
    calls = []
    token = CancellationToken()
    token.cancel()

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=sse_body())

    with pytest.raises(ProviderError) as ei:
        make_client(handler).stream_chat(_req(), CallOptions(cancellation_token=token))
    assert ei.value.code is ErrorCode.CANCELED
    assert calls == []


class _FakeResponse:
    status_code = 200
    headers: dict = {}

    def __init__(self, chunks: List[bytes]) -> None:
        self._chunks = chunks
        self.closed = 0

    def iter_bytes(self) -> Iterator[bytes]:
        return iter(self._chunks)

    def read(self, limit=None) -> bytes:
        return b""

    def close(self) -> None:
        self.closed += 1


class _Clock:
    def __init__(self) -> None:
        self.now = 10.0

    def __call__(self) -> float:
        return self.now


def test_deadline_expiry_mid_stream_is_timeout():
    clock = _Clock()
    response = _FakeResponse([sse_body(chunk({"content": "a"}), chunk({"content": "b"}))])
    stream = ChatStream(
        response,
        lambda payload: map_chunk(payload, provider="p"),
        provider="p",
        deadline=Deadline(at=clock.now + 30.0, clock=clock),
    )
    assert stream.recv().text == "a"
    clock.now += 60.0
    with pytest.raises(ProviderError) as ei:
        stream.recv()
    assert ei.value.code is ErrorCode.TIMEOUT
    assert response.closed == 1


def test_response_closed_once_after_done():
    response = _FakeResponse([sse_body(chunk({"content": "a"}))])
    stream = ChatStream(response, map_chunk)
    assert stream.collect().first_text() == "a"
    stream.close()
    assert response.closed == 1


class _AbortableResponse(_FakeResponse):
    def __init__(self, chunks: List[bytes]) -> None:
        super().__init__(chunks)
        self.aborted = 0

    def abort(self) -> None:
        self.aborted += 1


def test_cancellation_aborts_the_connection():
    token = CancellationToken()
    response = _AbortableResponse([sse_body(chunk({"content": "a"}), chunk({"content": "b"}))])
    stream = ChatStream(response, map_chunk, token=token)
    assert stream.recv().text == "a"
    token.cancel()
    assert (response.aborted, response.closed) == (1, 0)
    with pytest.raises(ProviderError) as ei:
        stream.recv()
    assert ei.value.code is ErrorCode.CANCELED
    stream.close()
    assert (response.aborted, response.closed) == (1, 0)


def test_cancellation_falls_back_to_close_without_abort():
    token = CancellationToken()
    response = _FakeResponse([sse_body(chunk({"content": "a"}))])
    stream = ChatStream(response, map_chunk, token=token)
    token.cancel()
    assert response.closed == 1
    with pytest.raises(ProviderError):
        stream.recv()
