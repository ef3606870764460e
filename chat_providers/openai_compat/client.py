"""
OpenAI-compatible chat client.

`OpenAICompatClient` is the single engine behind every provider preset. It
maps a `ChatRequest` through the provider adapter to JSON, executes it with
the `RetryingExecutor`, and maps the result back: a `ChatResponse` for
``chat`` and a `ChatStream` for ``stream_chat``.

Concurrency: a client may serve many threads. Per-call state (headers,
deadline, request id, accumulator) is built fresh for every call; the only
shared mutable state is the optional rate limiter.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from ..base.dto.chat import request_from_mapping
from ..base.errors import ErrorCode, ProviderError
from ..base.http.headers import REQUEST_ID_HEADER, get_header
from ..base.http.transport import BytesBody, HttpRequest, HttpxTransport, Transport
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import CallOptions, ChatRequest, ChatResponse
from ..base.resilience import (
    DEFAULT_RETRY_CONFIG,
    ExponentialBackoff,
    RateLimiter,
    RetryConfig,
    RetryingExecutor,
    Sleeper,
    with_error_handling,
)
from ..base.streaming import ChatStream, DecodedChunk
from .adapter import ProviderAdapter
from .chunk_mapper import map_chunk
from .request_mapper import map_request
from .response_mapper import map_response

RequestLike = Union[ChatRequest, Mapping[str, Any]]

DEFAULT_CHAT_PATH = "/v1/chat/completions"


def join_url(base_url: str, path: str) -> str:
    """Join base URL and path with exactly one slash between them."""
    if not path:
        return base_url
    if path.startswith(("http://", "https://")):
        return path
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class OpenAICompatClient:
    """Chat client for backends speaking the OpenAI chat-completions dialect.

    Parameters:
        provider_name: Name attached to errors and log events.
        base_url: API root (e.g. ``https://api.deepseek.com``).
        api_key: Bearer token; no ``Authorization`` header when empty.
        chat_path: Path of the chat-completions endpoint.
        default_model: Model used when a request leaves ``model`` empty.
        adapter: Provider hooks (no-op by default).
        transport: HTTP stack; defaults to a pooled `HttpxTransport`.
        retry_config: Retry policy; ``rng`` reseeds its jitter when given.
        timeout: Client-wide call budget in seconds.
        default_headers: Headers sent with every call.
        rate_limiter: Optional limiter shared by all calls of this client.
        allow_extra_override: Let ``request.extra`` replace mapped keys.
        rng: Random source for backoff jitter (deterministic tests).
        sleeper: Delay function between attempts (tests inject a recorder).
    """

    def __init__(
        self,
        *,
        provider_name: str = "openai_compat",
        base_url: str,
        api_key: Optional[str] = None,
        chat_path: str = DEFAULT_CHAT_PATH,
        default_model: str = "",
        adapter: Optional[ProviderAdapter] = None,
        transport: Optional[Transport] = None,
        retry_config: Optional[RetryConfig] = None,
        timeout: Optional[float] = None,
        default_headers: Optional[Mapping[str, str]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        allow_extra_override: bool = False,
        rng: Optional[random.Random] = None,
        sleeper: Optional[Sleeper] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.provider_name = provider_name
        self.base_url = base_url
        self.api_key = api_key or None
        self.chat_path = chat_path
        self.default_model = default_model
        self.adapter = adapter or ProviderAdapter()
        self.default_headers: Dict[str, str] = dict(default_headers or {})
        self.allow_extra_override = allow_extra_override
        self._logger = logger or get_logger(f"chat_providers.{provider_name}")
        retry_config = retry_config or DEFAULT_RETRY_CONFIG
        if rng is not None and isinstance(retry_config.backoff, ExponentialBackoff):
            backoff = retry_config.backoff
            retry_config = replace(retry_config, backoff=replace(backoff, rng=rng))
        self.executor = RetryingExecutor(
            transport or HttpxTransport(base_url),
            provider=provider_name,
            retry_config=retry_config,
            timeout=timeout,
            rate_limiter=rate_limiter,
            sleeper=sleeper,
            logger=self._logger,
        )

    @property
    def url(self) -> str:
        return join_url(self.base_url, self.chat_path)

    # ----- public API -----
    @with_error_handling
    def chat(self, request: RequestLike, options: Optional[CallOptions] = None) -> ChatResponse:
        """Send a non-streaming chat call and return the mapped response.

        Raises:
            ProviderError: classified failure (including ``bad_request`` for
                invalid requests detected before I/O).
            pydantic.ValidationError: ``request`` is a mapping that fails validation.
        """
        req = self._coerce(request)
        body = self._map(req, stream=False)
        model = body.get("model")
        http_request = self._http_request(body, stream=False)
        options = options or CallOptions()
        headers = self.executor.prepare_headers(http_request, options)
        ctx = LogContext(provider=self.provider_name, model=model, request_id=get_header(headers, REQUEST_ID_HEADER))
        http_request.headers = headers
        normalized_log_event(self._logger, "chat.start", ctx, phase="start", attempt=None, emitted=False)
        try:
            resp = self.executor.execute(http_request, options, model=model)
            response = self._decode_response(resp.content, model, ctx.request_id)
        except ProviderError as err:
            normalized_log_event(
                self._logger,
                "chat.error",
                ctx,
                phase="error",
                error_code=err.code.value,
                emitted=False,
                http_status=err.http_status or None,
                level=logging.WARNING,
            )
            raise
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            emitted=bool(response.choices),
            tokens=response.usage,
            response_id=response.id or None,
        )
        return response

    @with_error_handling
    def stream_chat(self, request: RequestLike, options: Optional[CallOptions] = None) -> ChatStream:
        """Open a streaming chat call.

        Retries apply only while opening the stream; the returned `ChatStream`
        is never retried once handed over.
        """
        req = self._coerce(request)
        body = self._map(req, stream=True)
        model = body.get("model")
        http_request = self._http_request(body, stream=True)
        options = options or CallOptions()
        headers = self.executor.prepare_headers(http_request, options)
        request_id = get_header(headers, REQUEST_ID_HEADER)
        ctx = LogContext(provider=self.provider_name, model=model, request_id=request_id)
        http_request.headers = headers
        # The deadline is computed once and shared by the open phase and the stream.
        deadline = self.executor.call_deadline(options)
        call_options = CallOptions(
            deadline=deadline,
            cancellation_token=options.cancellation_token,
            request_id=request_id,
        )
        normalized_log_event(self._logger, "stream.start", ctx, phase="start", emitted=False)
        try:
            resp = self.executor.open_stream(http_request, call_options, model=model)
        except ProviderError as err:
            normalized_log_event(
                self._logger,
                "stream.error",
                ctx,
                phase="start",
                error_code=err.code.value,
                emitted=False,
                http_status=err.http_status or None,
                level=logging.WARNING,
            )
            raise

        def decode(payload: str) -> DecodedChunk:
            return map_chunk(payload, provider=self.provider_name, model=model)

        return ChatStream(
            resp,
            decode,
            provider=self.provider_name,
            model=model,
            request_id=request_id,
            token=options.cancellation_token,
            deadline=deadline,
            logger=self._logger,
        )

    # ----- helpers -----
    def _coerce(self, request: RequestLike) -> ChatRequest:
        if isinstance(request, ChatRequest):
            return request
        if isinstance(request, Mapping):
            return request_from_mapping(dict(request))
        raise TypeError(f"unsupported request type: {type(request).__name__}")

    def _map(self, request: ChatRequest, *, stream: bool) -> Dict[str, Any]:
        return map_request(
            request,
            stream=stream,
            adapter=self.adapter,
            provider=self.provider_name,
            default_model=self.default_model,
            allow_extra_override=self.allow_extra_override,
        )

    def _headers(self, *, stream: bool) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if stream else "application/json",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        headers.update(self.default_headers)
        self.adapter.patch_headers(headers)
        return headers

    def _http_request(self, body: Dict[str, Any], *, stream: bool) -> HttpRequest:
        return HttpRequest(
            method="POST",
            url=self.url,
            headers=self._headers(stream=stream),
            body=BytesBody(json.dumps(body, ensure_ascii=False).encode("utf-8")),
        )

    def _decode_response(self, content: bytes, model: Optional[str], request_id: Optional[str]) -> ChatResponse:
        """Decode a 2xx body; undecodable bodies become ``parse`` errors carrying the raw bytes."""
        try:
            payload = json.loads(content)
        except ValueError as exc:
            raise ProviderError(
                code=ErrorCode.PARSE,
                message=f"invalid response body: {exc}",
                provider=self.provider_name,
                model=model,
                retryable=False,
                request_id=request_id,
                raw_body=content,
                cause=exc,
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError(
                code=ErrorCode.PARSE,
                message="response body is not a JSON object",
                provider=self.provider_name,
                model=model,
                retryable=False,
                request_id=request_id,
                raw_body=content,
            )
        response = map_response(payload, raw=content)
        self.adapter.enrich_response(response, payload)
        return response


__all__ = ["OpenAICompatClient", "RequestLike", "join_url", "DEFAULT_CHAT_PATH"]
