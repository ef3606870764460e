"""Concurrent use of one client, a shared rate limiter across threads, and
cancellation or deadline expiry while a stream read is blocked on a real socket.
"""

from __future__ import annotations

import json
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Tuple

import httpx
import pytest

from chat_providers.base.cancellation import CancellationToken
from chat_providers.base.errors import ErrorCode, ProviderError
from chat_providers.base.http import HttpxTransport
from chat_providers.base.models import CallOptions, ChatRequest, Message
from chat_providers.base.resilience import NO_RETRY, TokenBucketRateLimiter
from chat_providers.openai_compat import OpenAICompatClient
from chat_providers.tests.helpers import chunk, completion, sse_body

WORKERS = 8


def _req(text: str = "hi", **kwargs) -> ChatRequest:
    return ChatRequest(model="", messages=[Message.user(text)], **kwargs)


def test_shared_client_keeps_per_call_state_apart(make_client):
    barrier = threading.Barrier(WORKERS, timeout=5)
    seen: List[Tuple[str, str, float]] = []
    seen_lock = threading.Lock()

    def handler(request: httpx.Request) -> httpx.Response:
        barrier.wait()  # every call is in flight at once
        sent = json.loads(request.content)
        rid = request.headers["X-Request-ID"]
        with seen_lock:
            seen.append((rid, request.headers["Idempotency-Key"], sent["temperature"]))
        return httpx.Response(200, json=completion("echo " + sent["messages"][0]["content"], id=rid))

    client = make_client(handler)

    def call(i: int):
        return i, client.chat(_req(f"m{i}", temperature=i / 10), CallOptions(request_id=f"rid-{i}"))

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(call, range(WORKERS)))

    for i, resp in results:
        assert resp.id == f"rid-{i}"
        assert resp.first_text() == f"echo m{i}"
    assert sorted(seen) == sorted((f"rid-{i}", f"rid-{i}", i / 10) for i in range(WORKERS))


def test_shared_client_streams_concurrently(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        text = json.loads(request.content)["messages"][0]["content"]
        body = sse_body(*(chunk({"content": ch}) for ch in text))
        return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

    client = make_client(handler)

    def call(i: int) -> str:
        return client.stream_chat(_req(f"stream-{i}")).collect().first_text()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        texts = list(pool.map(call, range(WORKERS)))
    assert texts == [f"stream-{i}" for i in range(WORKERS)]


def test_rate_limiter_paces_threads_at_its_rate():
    rate = 20.0
    limiter = TokenBucketRateLimiter(rate, burst=1)
    barrier = threading.Barrier(6, timeout=5)
    starts: List[float] = []
    starts_lock = threading.Lock()

    def worker(use_token: bool) -> None:
        barrier.wait()
        limiter.acquire(CancellationToken() if use_token else None)
        with starts_lock:
            starts.append(time.monotonic())

    threads = [threading.Thread(target=worker, args=(i % 2 == 0,)) for i in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    starts.sort()
    assert len(starts) == 6
    # the first slot is free; every later one is a full interval after the previous reservation
    assert starts[-1] - starts[0] >= 5 / rate - 0.01
    assert min(b - a for a, b in zip(starts, starts[1:])) >= 0.5 / rate


class _StallingSSEServer:
    """One-connection HTTP server: answers with ``first`` as an SSE body, then goes quiet."""

    def __init__(self, first: bytes, hold: float = 10.0) -> None:
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        host, port = self._listener.getsockname()
        self.url = f"http://{host}:{port}"
        self._first = first
        self._hold = hold
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _read_request(self, conn: socket.socket) -> None:
        data = b""
        while b"\r\n\r\n" not in data:
            part = conn.recv(65536)
            if not part:
                return
            data += part
        head, _, body = data.partition(b"\r\n\r\n")
        length = 0
        for line in head.split(b"\r\n")[1:]:
            name, _, value = line.partition(b":")
            if name.strip().lower() == b"content-length":
                length = int(value.strip())
        while len(body) < length:
            part = conn.recv(65536)
            if not part:
                return
            body += part

    def _serve(self) -> None:
        conn, _ = self._listener.accept()
        with conn:
            self._read_request(conn)
            conn.sendall(
                b"HTTP/1.1 200 OK\r\n"
                b"Content-Type: text/event-stream\r\n"
                b"Connection: close\r\n\r\n" + self._first
            )
            self._stop.wait(self._hold)

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=5)
        self._listener.close()


@pytest.fixture()
def stalling_server() -> Iterator[_StallingSSEServer]:
    server = _StallingSSEServer(sse_body(chunk({"content": "a"}), done=False))
    yield server
    server.close()


def _socket_client(url: str) -> OpenAICompatClient:
    http_client = httpx.Client(trust_env=False, timeout=30.0)
    return OpenAICompatClient(
        provider_name="local",
        base_url=url,
        default_model="m",
        transport=HttpxTransport(client=http_client),
        retry_config=NO_RETRY,
    )


def test_cancel_unblocks_a_read_waiting_on_the_socket(stalling_server):
    token = CancellationToken()
    stream = _socket_client(stalling_server.url).stream_chat(_req(), CallOptions(cancellation_token=token))
    assert stream.recv().text == "a"

    timer = threading.Timer(0.3, token.cancel, args=("user pressed stop",))
    started = time.monotonic()
    timer.start()
    try:
        with pytest.raises(ProviderError) as ei:
            stream.recv()
    finally:
        timer.cancel()
    assert ei.value.code is ErrorCode.CANCELED
    assert ei.value.message == "user pressed stop"
    assert time.monotonic() - started < 3.0
    assert stream.recv() is None
    assert stream.response().first_text() == "a"


def test_deadline_unblocks_a_read_waiting_on_the_socket(stalling_server):
    stream = _socket_client(stalling_server.url).stream_chat(_req(), CallOptions(timeout=1.0))
    assert stream.recv().text == "a"
    started = time.monotonic()
    with pytest.raises(ProviderError) as ei:
        stream.recv()
    assert ei.value.code is ErrorCode.TIMEOUT
    assert time.monotonic() - started < 3.0
