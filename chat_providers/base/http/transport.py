"""HTTP transport abstraction used by the retrying executor.

The executor never talks to ``httpx`` directly: it builds an `HttpRequest`
and hands it to a `Transport`. `HttpxTransport` is the production
implementation; unless given an explicit ``httpx.Client`` (tests pass one
configured with ``httpx.MockTransport``) it shares process-wide pooled
clients, one per base URL and purpose, closed at interpreter exit.

Request bodies are modelled explicitly so that a retry can tell whether the
body may be re-sent: `BytesBody` is always replayable, `StreamBody` only when
built with a replay factory.
"""

from __future__ import annotations

import atexit
import socket
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Protocol, Tuple, runtime_checkable

import httpx

from ..timeouts import get_timeout_config


class RequestBody(Protocol):
    """A request body that may or may not support being sent again."""

    @property
    def replayable(self) -> bool: ...

    def open(self) -> bytes | Iterable[bytes]: ...


@dataclass(frozen=True)
class BytesBody:
    """Fully buffered body; every attempt re-sends the same bytes."""

    data: bytes = b""

    @property
    def replayable(self) -> bool:
        return True

    def open(self) -> bytes:
        return self.data


class StreamBody:
    """One-shot iterable body.

    Without ``factory`` the body can be opened once; with one, every ``open``
    after the first calls the factory to obtain a fresh iterable.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        factory: Optional[Callable[[], Iterable[bytes]]] = None,
    ) -> None:
        self._chunks: Optional[Iterable[bytes]] = chunks
        self._factory = factory

    @property
    def replayable(self) -> bool:
        return self._chunks is not None or self._factory is not None

    def open(self) -> Iterable[bytes]:
        if self._chunks is not None:
            chunks, self._chunks = self._chunks, None
            return chunks
        if self._factory is None:
            raise RuntimeError("stream body already consumed")
        return self._factory()


@dataclass
class HttpRequest:
    """One logical HTTP call (attempts are derived from it by the executor)."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: RequestBody = field(default_factory=BytesBody)
    timeout: Optional[float] = None


@dataclass
class HttpResponse:
    """Fully buffered HTTP response."""

    status_code: int
    headers: Dict[str, str]
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class StreamingHttpResponse(Protocol):
    """Open response whose body is consumed incrementally.

    Implementations may also offer ``abort()``, callable from another thread
    to unblock a pending read; `ChatStream` falls back to ``close()``.
    """

    status_code: int
    headers: Dict[str, str]

    def iter_bytes(self) -> Iterator[bytes]: ...

    def read(self, limit: Optional[int] = None) -> bytes: ...

    def close(self) -> None: ...


@runtime_checkable
class Transport(Protocol):
    """What the executor needs from an HTTP stack."""

    def post_json(self, request: HttpRequest) -> HttpResponse: ...

    def post_stream(self, request: HttpRequest) -> StreamingHttpResponse: ...


class HttpxStreamingResponse:
    """`StreamingHttpResponse` backed by an ``httpx.Response`` opened with ``stream=True``."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.status_code = response.status_code
        self.headers = dict(response.headers)
        self._closed = False

    def iter_bytes(self) -> Iterator[bytes]:
        return self._response.iter_bytes()

    def read(self, limit: Optional[int] = None) -> bytes:
        buf = bytearray()
        for chunk in self._response.iter_bytes():
            buf.extend(chunk)
            if limit is not None and len(buf) >= limit:
                break
        return bytes(buf if limit is None else buf[:limit])

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()

    def abort(self) -> None:
        """Shut the connection's socket down, then close.

        Called from another thread to wake a reader blocked in ``iter_bytes``;
        ``close`` alone leaves that read waiting for the server.
        """
        network_stream = self._response.extensions.get("network_stream")
        sock = network_stream.get_extra_info("socket") if network_stream is not None else None
        if sock is not None:
            try:
                # plain-socket shutdown: SSLSocket.shutdown drops the TLS object the reader is using
                socket.socket.shutdown(sock, socket.SHUT_RDWR)
            except OSError:
                pass  # peer already closed the connection
        self.close()


def _default_timeout(purpose: str, stream_idle_timeout: Optional[float]) -> httpx.Timeout:
    """Client-level timeout used when an attempt carries no budget of its own."""
    cfg = get_timeout_config()
    if purpose == "stream":
        read = stream_idle_timeout or cfg.stream_timeout_seconds
        return httpx.Timeout(cfg.http_timeout_seconds, connect=cfg.start_timeout_seconds, read=read)
    return httpx.Timeout(cfg.http_timeout_seconds, connect=cfg.start_timeout_seconds)


_PoolKey = Tuple[str, str, Optional[float]]


class _ClientPool:
    """Process-wide ``httpx.Client`` instances shared by every `HttpxTransport`.

    One client per (base URL, purpose, stream idle timeout) so that chat and
    stream traffic keep separate connection pools and client-level timeouts.
    """

    def __init__(self) -> None:
        self._clients: Dict[_PoolKey, httpx.Client] = {}
        self._lock = threading.Lock()

    def get(self, base_url: Optional[str], purpose: str, stream_idle_timeout: Optional[float] = None) -> httpx.Client:
        key = (base_url or "", purpose, stream_idle_timeout if purpose == "stream" else None)
        with self._lock:
            client = self._clients.get(key)
            if client is None or client.is_closed:
                client = httpx.Client(base_url=key[0], timeout=_default_timeout(purpose, key[2]))
                self._clients[key] = client
            return client

    def close_all(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()


_POOL = _ClientPool()


def pooled_client(
    base_url: Optional[str],
    purpose: str = "chat",
    stream_idle_timeout: Optional[float] = None,
) -> httpx.Client:
    """Return the shared client for ``base_url`` and ``purpose`` (``"chat"`` or ``"stream"``)."""
    return _POOL.get(base_url, purpose, stream_idle_timeout)


def close_all_clients() -> None:
    """Close every pooled client; later calls get fresh ones."""
    _POOL.close_all()


atexit.register(close_all_clients)


class HttpxTransport:
    """`Transport` implementation over ``httpx``.

    Parameters:
        base_url: API base URL; selects the pooled client.
        client: Explicit client used instead of the pool (tests pass one
            wrapping ``httpx.MockTransport``).
        stream_idle_timeout: Read timeout between stream chunks.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        stream_idle_timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._stream_idle_timeout = stream_idle_timeout

    def _get_client(self, purpose: str) -> httpx.Client:
        if self._client is not None:
            return self._client
        return pooled_client(self._base_url, purpose, self._stream_idle_timeout)

    def _stream_timeout(self, budget: Optional[float]) -> Any:
        idle = self._stream_idle_timeout
        if budget is not None:
            return httpx.Timeout(budget, read=min(idle, budget) if idle else budget)
        if self._client is not None and idle is not None:
            return _default_timeout("stream", idle)
        return httpx.USE_CLIENT_DEFAULT

    def post_json(self, request: HttpRequest) -> HttpResponse:
        client = self._get_client("chat")
        resp = client.request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body.open(),
            timeout=request.timeout if request.timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        return HttpResponse(status_code=resp.status_code, headers=dict(resp.headers), content=resp.content)

    def post_stream(self, request: HttpRequest) -> HttpxStreamingResponse:
        client = self._get_client("stream")
        built = client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body.open(),
            timeout=self._stream_timeout(request.timeout),
        )
        return HttpxStreamingResponse(client.send(built, stream=True))


__all__ = [
    "RequestBody",
    "BytesBody",
    "StreamBody",
    "HttpRequest",
    "HttpResponse",
    "StreamingHttpResponse",
    "Transport",
    "HttpxStreamingResponse",
    "HttpxTransport",
    "pooled_client",
    "close_all_clients",
]
