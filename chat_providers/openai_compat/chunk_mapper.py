"""
Stream chunk direction of the wire mapper: one SSE payload -> stream events.

Each ``chat.completion.chunk`` becomes, per choice, reasoning deltas, text
deltas, tool-call deltas and a ``choice_done`` event (when a finish reason is
present), followed by a ``usage`` event when the chunk carries usage. A chunk
carrying an ``error`` object is raised as a classified `ProviderError`.
"""
from __future__ import annotations

import json
from typing import Any, Iterable, List, Mapping, Optional

from ..base.errors import ErrorCode, ProviderError, classify_status, parse_error_envelope
from ..base.models import StreamEvent
from ..base.streaming import DecodedChunk
from .response_mapper import (
    map_created,
    map_finish_reason,
    map_usage,
    message_reasoning,
    split_content,
    to_int,
)

# Substrings of provider error codes/types that name a more precise kind than ``server``.
_ENVELOPE_KINDS = (
    (("rate_limit", "too_many_requests", "quota"), ErrorCode.RATE_LIMIT),
    (("auth", "api_key", "permission", "unauthorized"), ErrorCode.AUTH),
    (("not_found", "model_not_found"), ErrorCode.NOT_FOUND),
    (("invalid_request", "bad_request", "invalid_parameter", "context_length"), ErrorCode.BAD_REQUEST),
    (("timeout",), ErrorCode.TIMEOUT),
)


def kind_from_envelope(code: Optional[str], type_: Optional[str]) -> ErrorCode:
    """Pick the error kind for an in-stream error envelope (default ``server``)."""
    if code and code.isdigit():
        kind, _ = classify_status(int(code))
        if kind is not ErrorCode.UNKNOWN:
            return kind
    haystack = f"{code or ''} {type_ or ''}".lower()
    for needles, kind in _ENVELOPE_KINDS:
        if any(n in haystack for n in needles):
            return kind
    return ErrorCode.SERVER


def _error_from_chunk(chunk: Mapping[str, Any], payload: str, provider: str, model: Optional[str]) -> ProviderError:
    message, provider_type, provider_code = parse_error_envelope(chunk)
    kind = kind_from_envelope(provider_code, provider_type)
    return ProviderError(
        code=kind,
        message=message or "provider reported an error in the stream",
        provider=provider,
        model=model,
        retryable=kind in (ErrorCode.SERVER, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT),
        http_status=0,
        provider_code=provider_code,
        provider_type=provider_type,
        raw_body=payload.encode("utf-8"),
    )


def _tool_call_events(items: Any, choice_index: int) -> Iterable[StreamEvent]:
    if not isinstance(items, list):
        return
    for position, item in enumerate(items):
        if not isinstance(item, Mapping):
            continue
        fn = item.get("function") if isinstance(item.get("function"), Mapping) else {}
        arguments = fn.get("arguments")
        if arguments is None:
            arguments_text = ""
        elif isinstance(arguments, str):
            arguments_text = arguments
        else:
            arguments_text = json.dumps(arguments, ensure_ascii=False)
        index = item.get("index")
        yield StreamEvent.tool_call_delta(
            choice_index=choice_index,
            index=to_int(index) if index is not None else position,
            id=str(item.get("id") or ""),
            name=str(fn.get("name") or ""),
            arguments=arguments_text,
        )


def map_chunk_payload(chunk: Mapping[str, Any]) -> List[StreamEvent]:
    """Map an already-decoded chunk object to events (no error handling)."""
    events: List[StreamEvent] = []
    for position, choice in enumerate(chunk.get("choices") or []):
        if not isinstance(choice, Mapping):
            continue
        index = to_int(choice.get("index")) if choice.get("index") is not None else position
        delta = choice.get("delta")
        if not isinstance(delta, Mapping):
            # Some backends put the final message under "message" in stream chunks.
            delta = choice.get("message") if isinstance(choice.get("message"), Mapping) else {}
        text, inline_reasoning, _ = split_content(delta.get("content"))
        reasoning = message_reasoning(delta) + inline_reasoning
        if reasoning:
            events.append(StreamEvent.reasoning_delta(reasoning, index))
        if text:
            events.append(StreamEvent.text_delta(text, index))
        events.extend(_tool_call_events(delta.get("tool_calls"), index))
        finish = map_finish_reason(choice.get("finish_reason"))
        if finish is not None:
            events.append(StreamEvent.choice_done(finish, index))
    usage = map_usage(chunk.get("usage"))
    if usage is not None:
        events.append(StreamEvent.usage_event(usage))
    return events


def map_chunk(payload: str, *, provider: str = "", model: Optional[str] = None) -> DecodedChunk:
    """Decode one SSE ``data`` payload.

    Raises:
        ProviderError: ``parse`` when the payload is not a JSON object, or the
            classified kind of an in-stream ``error`` envelope.
    """
    try:
        chunk = json.loads(payload)
    except ValueError as exc:
        raise ProviderError(
            code=ErrorCode.PARSE,
            message=f"invalid stream chunk: {exc}",
            provider=provider,
            model=model,
            retryable=False,
            raw_body=payload.encode("utf-8"),
            cause=exc,
        ) from exc
    if not isinstance(chunk, Mapping):
        raise ProviderError(
            code=ErrorCode.PARSE,
            message="stream chunk is not a JSON object",
            provider=provider,
            model=model,
            retryable=False,
            raw_body=payload.encode("utf-8"),
        )
    if chunk.get("error"):
        raise _error_from_chunk(chunk, payload, provider, model)
    return DecodedChunk(
        events=map_chunk_payload(chunk),
        id=str(chunk.get("id") or ""),
        model=str(chunk.get("model") or ""),
        created_at=map_created(chunk.get("created")),
    )


__all__ = ["map_chunk", "map_chunk_payload", "kind_from_envelope"]
