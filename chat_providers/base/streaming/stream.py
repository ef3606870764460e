"""Chat stream: a single-consumer iterator over decoded stream events.

`ChatStream` owns an open streaming HTTP response. It pulls SSE payloads
through `SSEDecoder`, turns each into `StreamEvent`s with the injected chunk
decoder, and folds every delivered event into a `StreamAccumulator` so a
partial or final `ChatResponse` is available at any time.

Termination:
    ``[DONE]`` or end of input yields a final ``done`` event and releases the
    connection. Decode failures and provider error chunks raise a classified
    `ProviderError` and release the connection. Cancelling the call's token
    aborts the connection from the cancelling thread, so a read blocked on
    the socket returns at once, and surfaces as ``canceled``; an expired
    deadline does the same and surfaces as ``timeout``. ``close()`` by
    the consumer is not an error: iteration simply ends.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional

from ..cancellation import CancellationToken
from ..errors import ErrorCode, ProviderError, error_from_exception
from ..http.transport import StreamingHttpResponse
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import ChatResponse, StreamEvent
from ..timeouts import Deadline, DeadlineExceeded
from .accumulator import StreamAccumulator
from .sse import SSEDecoder

DONE_SENTINEL = "[DONE]"


@dataclass
class DecodedChunk:
    """Events and metadata decoded from one stream payload."""

    events: List[StreamEvent] = field(default_factory=list)
    id: str = ""
    model: str = ""
    created_at: Optional[datetime] = None


ChunkDecoder = Callable[[str], DecodedChunk]


class ChatStream:
    """Iterator of `StreamEvent` objects for one streaming call.

    Parameters:
        response: Open 2xx streaming response (owned by the stream).
        decode_chunk: Maps one SSE payload to a `DecodedChunk`; raises
            `ProviderError` for provider error chunks or undecodable payloads.
        provider / model / request_id: Error and log context.
        token: Optional cancellation token observed by reads.
        deadline: Optional deadline; on expiry the connection is closed.
        logger: Logger for ``stream.*`` events.
    """

    def __init__(
        self,
        response: StreamingHttpResponse,
        decode_chunk: ChunkDecoder,
        *,
        provider: str = "",
        model: Optional[str] = None,
        request_id: Optional[str] = None,
        token: Optional[CancellationToken] = None,
        deadline: Optional[Deadline] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._response = response
        self._decode_chunk = decode_chunk
        self._decoder = SSEDecoder(response.iter_bytes())
        self._accumulator = StreamAccumulator()
        self._pending: Deque[StreamEvent] = deque()
        self._provider = provider
        self._model = model
        self._request_id = request_id
        self._token = token
        self._deadline = deadline
        self._logger = logger or get_logger("chat_providers.stream")
        self._ctx = LogContext(provider=provider, model=model, request_id=request_id)
        self._lock = threading.Lock()
        self._released = False
        self._finished = False
        self._closed_by_caller = False
        self._cancelled = False
        self._expired = False
        self._emitted = 0
        self._unregister_cancel: Callable[[], None] = lambda: None
        self._timer: Optional[threading.Timer] = None
        if token is not None:
            self._unregister_cancel = token.on_cancel(self._on_cancel)
        if deadline is not None:
            self._timer = threading.Timer(deadline.remaining(), self._on_deadline)
            self._timer.daemon = True
            self._timer.start()

    # ----- iteration -----
    def __iter__(self) -> "ChatStream":
        return self

    def __next__(self) -> StreamEvent:
        event = self.recv()
        if event is None:
            raise StopIteration
        return event

    def recv(self) -> Optional[StreamEvent]:
        """Return the next event, or ``None`` once the stream has ended or was closed."""
        while not self._pending:
            if self._finished or self._closed_by_caller:
                return None
            self._pull()
        event = self._pending.popleft()
        self._accumulator.add(event)
        self._emitted += 1
        if event.is_done:
            self._finish()
        return event

    def response(self) -> ChatResponse:
        """Partial or final response built from the events delivered so far."""
        return self._accumulator.response()

    def collect(self) -> ChatResponse:
        """Drain the stream and return the final response."""
        while self.recv() is not None:
            pass
        return self.response()

    def close(self) -> None:
        """Release the connection; idempotent. Iteration ends without error."""
        with self._lock:
            if not self._finished:
                self._closed_by_caller = True
            first_close = not self._released
        self._release()
        if first_close:
            normalized_log_event(
                self._logger,
                "stream.closed",
                self._ctx,
                phase="finalize",
                emitted=self._emitted > 0,
                tokens=self._accumulator.response().usage,
            )

    def __enter__(self) -> "ChatStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----- internals -----
    def _pull(self) -> None:
        """Read the next payload and queue its events (or the terminal ``done``)."""
        self._check_interrupted()
        try:
            payload = self._decoder.next_payload()
        except Exception as exc:
            self._check_interrupted()
            if self._closed_by_caller:
                return
            raise self._fail(exc) from exc
        self._check_interrupted()
        if self._closed_by_caller:
            return
        if payload is None or payload.strip() == DONE_SENTINEL:
            self._pending.append(StreamEvent.done())
            return
        if not payload.strip():
            return
        try:
            decoded = self._decode_chunk(payload)
        except Exception as exc:
            raise self._fail(exc) from exc
        self._accumulator.set_metadata(decoded.id, decoded.model, decoded.created_at)
        self._pending.extend(decoded.events)

    def _check_interrupted(self) -> None:
        if self._cancelled or (self._token is not None and self._token.cancelled):
            raise self._fail(None, code=ErrorCode.CANCELED)
        if self._expired or (self._deadline is not None and self._deadline.expired):
            raise self._fail(DeadlineExceeded("stream deadline exceeded"))

    def _fail(self, exc: Optional[BaseException], code: Optional[ErrorCode] = None) -> ProviderError:
        """Classify a stream failure, release the connection and log it."""
        if code is ErrorCode.CANCELED or self._cancelled:
            reason = self._token.reason if self._token is not None else None
            err = ProviderError(
                code=ErrorCode.CANCELED,
                message=reason or "stream cancelled",
                provider=self._provider,
                model=self._model,
                retryable=False,
                request_id=self._request_id,
                cause=exc,
            )
        elif self._expired and not isinstance(exc, DeadlineExceeded):
            err = error_from_exception(
                DeadlineExceeded("stream deadline exceeded"),
                provider=self._provider,
                model=self._model,
                request_id=self._request_id,
            )
            err.cause = exc
        else:
            err = error_from_exception(
                exc if exc is not None else RuntimeError("stream failed"),
                provider=self._provider,
                model=self._model,
                request_id=self._request_id,
            )
        self._finished = True
        self._release()
        normalized_log_event(
            self._logger,
            "stream.error",
            self._ctx,
            phase="error",
            error_code=err.code.value,
            emitted=self._emitted > 0,
            level=logging.WARNING,
        )
        return err

    def _finish(self) -> None:
        self._finished = True
        self._release()
        response = self._accumulator.response()
        normalized_log_event(
            self._logger,
            "stream.end",
            self._ctx,
            phase="finalize",
            emitted=self._emitted > 0,
            tokens=response.usage,
            response_id=response.id or None,
        )

    def _release(self, abort: bool = False) -> None:
        """Release the connection once; ``abort`` also wakes a read blocked in another thread."""
        with self._lock:
            if self._released:
                return
            self._released = True
        self._unregister_cancel()
        if self._timer is not None:
            self._timer.cancel()
        if abort:
            getattr(self._response, "abort", self._response.close)()
        else:
            self._response.close()

    def _on_cancel(self) -> None:
        self._cancelled = True
        self._release(abort=True)

    def _on_deadline(self) -> None:
        self._expired = True
        self._release(abort=True)


__all__ = ["ChatStream", "ChunkDecoder", "DecodedChunk", "DONE_SENTINEL"]
