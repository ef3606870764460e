"""Retrying HTTP executor.

Runs one logical call as a sequence of attempts against a `Transport`:

- every attempt carries the call's request id (and an ``Idempotency-Key``
  for mutating methods);
- the per-attempt timeout is the remaining time of the earliest of the
  per-call timeout, the client-wide timeout and the caller deadline;
- failed attempts are classified, and only retryable failures whose HTTP
  status is on the allow-list are retried, after a backoff (or a capped
  ``Retry-After``) sleep that never overruns the deadline;
- a retried response's body is drained and closed before sleeping;
- a body that cannot be replayed turns a retry into `BodyNotReplayableError`.

Streaming calls retry only until a 2xx response is obtained; the open
response is then handed to the caller and never retried.
"""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Dict, Optional, TypeVar

import httpx

from ..cancellation import CancellationToken
from ..errors import (
    MAX_ERROR_BODY_BYTES,
    BodyNotReplayableError,
    ErrorCode,
    ProviderError,
    error_from_exception,
    error_from_response,
)
from ..http.headers import (
    IDEMPOTENCY_KEY_HEADER,
    MUTATING_METHODS,
    REQUEST_ID_HEADER,
    get_header,
    new_request_id,
)
from ..http.transport import HttpRequest, HttpResponse, StreamingHttpResponse, Transport
from ..logging import LogContext, get_logger, normalized_log_event
from ..models_parts.call_options import CallOptions
from ..timeouts import Deadline, DeadlineExceeded, earliest_deadline
from .rate_limit import RateLimiter
from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, Sleeper, cancellable_sleep

R = TypeVar("R", HttpResponse, StreamingHttpResponse)


class RetryingExecutor:
    """Execute HTTP calls with retries, deadlines, rate limiting and cancellation.

    Parameters:
        transport: HTTP stack used for every attempt.
        provider: Provider name attached to errors and log events.
        retry_config: Retry policy (defaults to three attempts).
        timeout: Client-wide call budget in seconds.
        rate_limiter: Optional limiter shared by every call of the client.
        sleeper: Blocking delay function; tests inject a recorder.
        logger: Logger for ``retry.attempt`` events.
        clock: Monotonic clock used for deadlines and the elapsed budget.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        provider: str = "",
        retry_config: Optional[RetryConfig] = None,
        timeout: Optional[float] = None,
        rate_limiter: Optional[RateLimiter] = None,
        sleeper: Optional[Sleeper] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.transport = transport
        self.provider = provider
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self._sleep = sleeper or cancellable_sleep
        self._logger = logger or get_logger("chat_providers.executor")
        self._clock = clock

    # ----- public API -----
    def execute(
        self,
        request: HttpRequest,
        options: Optional[CallOptions] = None,
        *,
        model: Optional[str] = None,
    ) -> HttpResponse:
        """Run a buffered call; return the 2xx response or raise `ProviderError`."""
        return self._run(request, options, model, self.transport.post_json, self._drain_buffered)

    def open_stream(
        self,
        request: HttpRequest,
        options: Optional[CallOptions] = None,
        *,
        model: Optional[str] = None,
    ) -> StreamingHttpResponse:
        """Open a streaming call; return the open 2xx response or raise `ProviderError`."""
        return self._run(request, options, model, self.transport.post_stream, self._drain_stream)

    def call_deadline(self, options: Optional[CallOptions]) -> Optional[Deadline]:
        """Earliest of the per-call timeout, the client timeout and the caller deadline."""
        options = options or CallOptions()
        return earliest_deadline(options.timeout, self.timeout, deadline=options.deadline, clock=self._clock)

    def prepare_headers(self, request: HttpRequest, options: Optional[CallOptions]) -> Dict[str, str]:
        """Merge per-call headers and stamp request id / idempotency key."""
        options = options or CallOptions()
        headers = dict(request.headers)
        headers.update(options.headers)
        request_id = options.request_id or get_header(headers, REQUEST_ID_HEADER) or new_request_id()
        _set_header(headers, REQUEST_ID_HEADER, request_id)
        if request.method.upper() in MUTATING_METHODS and get_header(headers, IDEMPOTENCY_KEY_HEADER) is None:
            headers[IDEMPOTENCY_KEY_HEADER] = request_id
        return headers

    # ----- attempt loop -----
    def _run(
        self,
        request: HttpRequest,
        options: Optional[CallOptions],
        model: Optional[str],
        send: Callable[[HttpRequest], R],
        drain: Callable[[R], bytes],
    ) -> R:
        options = options or CallOptions()
        token = options.cancellation_token
        deadline = self.call_deadline(options)
        headers = self.prepare_headers(request, options)
        request_id = get_header(headers, REQUEST_ID_HEADER)
        ctx = LogContext(provider=self.provider, model=model, request_id=request_id)
        cfg = self.retry_config
        max_attempts = max(1, cfg.max_attempts)
        started = self._clock()
        attempt = 0

        while True:
            attempt += 1
            self._check_live(token, deadline, model, request_id)
            if attempt > 1 and not request.body.replayable:
                raise BodyNotReplayableError(
                    "request body is not replayable (one-shot body without a replay factory)"
                )
            if self.rate_limiter is not None:
                try:
                    self.rate_limiter.acquire(token=token, deadline=deadline)
                except Exception as exc:
                    raise self._classify(exc, model, request_id) from exc

            attempt_request = replace(
                request,
                headers=dict(headers),
                timeout=deadline.remaining() if deadline is not None else request.timeout,
            )
            try:
                response = send(attempt_request)
            except BodyNotReplayableError:
                raise
            except Exception as exc:
                err = self._classify_transport(exc, token, deadline, model, request_id)
                status = 0
            else:
                status = response.status_code
                if 200 <= status < 300:
                    return response
                body = drain(response)
                err = error_from_response(
                    status,
                    body,
                    response.headers,
                    provider=self.provider,
                    model=model,
                    request_id=request_id,
                )

            retry = err.retryable and (status == 0 or cfg.can_retry_status(status)) and attempt < max_attempts
            delay = cfg.delay_for(attempt, status, err.retry_after) if retry else None
            if retry and cfg.max_elapsed is not None and (self._clock() - started) + delay > cfg.max_elapsed:
                retry = False
            normalized_log_event(
                self._logger,
                "retry.attempt",
                ctx,
                phase="retry",
                attempt=attempt,
                error_code=err.code.value,
                emitted=False,
                http_status=status or None,
                retrying=retry,
                delay=round(delay, 3) if retry and delay is not None else None,
                level=logging.WARNING if retry else logging.INFO,
            )
            if not retry:
                raise err
            if deadline is not None:
                delay = min(delay, deadline.remaining())
            try:
                self._sleep(delay, token)
            except Exception as exc:
                raise self._classify(exc, model, request_id) from exc

    # ----- helpers -----
    def _check_live(
        self,
        token: Optional[CancellationToken],
        deadline: Optional[Deadline],
        model: Optional[str],
        request_id: Optional[str],
    ) -> None:
        try:
            if token is not None:
                token.raise_if_cancelled()
            if deadline is not None:
                deadline.raise_if_expired()
        except Exception as exc:
            raise self._classify(exc, model, request_id) from exc

    def _classify(self, exc: BaseException, model: Optional[str], request_id: Optional[str]) -> ProviderError:
        return error_from_exception(exc, provider=self.provider, model=model, request_id=request_id)

    def _classify_transport(
        self,
        exc: BaseException,
        token: Optional[CancellationToken],
        deadline: Optional[Deadline],
        model: Optional[str],
        request_id: Optional[str],
    ) -> ProviderError:
        """Attribute a transport failure to cancellation or the caller deadline when they caused it."""
        if token is not None and token.cancelled:
            err = ProviderError(
                code=ErrorCode.CANCELED,
                message=token.reason or "operation cancelled",
                provider=self.provider,
                model=model,
                retryable=False,
                request_id=request_id,
                cause=exc,
            )
        elif deadline is not None and deadline.expired:
            err = self._classify(DeadlineExceeded("deadline exceeded"), model, request_id)
            err.cause = exc
        else:
            err = self._classify(exc, model, request_id)
        return err

    @staticmethod
    def _drain_buffered(response: HttpResponse) -> bytes:
        return response.content[:MAX_ERROR_BODY_BYTES]

    @staticmethod
    def _drain_stream(response: StreamingHttpResponse) -> bytes:
        try:
            return response.read(MAX_ERROR_BODY_BYTES)
        except (httpx.HTTPError, OSError):
            return b""
        finally:
            response.close()


def _set_header(headers: Dict[str, str], name: str, value: str) -> None:
    """Set ``name`` replacing any differently-cased existing key."""
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]
    headers[name] = value


__all__ = ["RetryingExecutor"]
