"""
Response direction of the wire mapper: OpenAI chat JSON -> `ChatResponse`.

Backends disagree on where reasoning lives (``reasoning_content`` for
DeepSeek/Qwen, ``reasoning`` for Ollama, ``thinking`` elsewhere, or typed
content parts), on whether ``content`` is a string or an array, and on
whether usage counters are numbers or numeric strings. The helpers here
normalize all of those without raising on missing keys.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..base.models import (
    ChatResponse,
    Choice,
    ContentPart,
    FinishReason,
    Message,
    ToolCall,
    Usage,
)

# Message-level reasoning fields, in precedence order.
REASONING_FIELDS = ("reasoning_content", "reasoning", "thinking")
REASONING_PART_TYPES = frozenset({"reasoning", "thinking"})

_FINISH_REASONS: Dict[str, FinishReason] = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "content_filter": FinishReason.CONTENT_FILTER,
}


def map_finish_reason(value: Any) -> Optional[FinishReason]:
    """Map a wire finish reason; empty or null means "not finished" (``None``)."""
    if value is None or value == "":
        return None
    return _FINISH_REASONS.get(str(value), FinishReason.UNKNOWN)


def to_int(value: Any) -> int:
    """Best-effort integer coercion (numeric strings accepted); anything else is ``0``."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                return int(float(text))
            except ValueError:
                return 0
    return 0


def _detail(usage: Mapping[str, Any], section: str, key: str) -> int:
    details = usage.get(section)
    if isinstance(details, Mapping):
        return to_int(details.get(key))
    return 0


def map_usage(payload: Any) -> Optional[Usage]:
    """Map a ``usage`` object; ``None`` when absent or not an object.

    Flat keys win; nested ``*_tokens_details`` are consulted only when the flat
    value is zero or absent.
    """
    if not isinstance(payload, Mapping):
        return None
    prompt = to_int(payload.get("prompt_tokens"))
    completion = to_int(payload.get("completion_tokens"))
    total = to_int(payload.get("total_tokens")) or prompt + completion
    cached = to_int(payload.get("prompt_cache_hit_tokens")) or to_int(payload.get("cached_tokens"))
    if not cached:
        cached = _detail(payload, "prompt_tokens_details", "cached_tokens")
    reasoning = to_int(payload.get("reasoning_tokens"))
    if not reasoning:
        reasoning = _detail(payload, "completion_tokens_details", "reasoning_tokens")
    return Usage(
        prompt_tokens=prompt,
        completion_tokens=completion,
        total_tokens=total,
        cached_tokens=cached,
        cache_miss_tokens=to_int(payload.get("prompt_cache_miss_tokens")),
        reasoning_tokens=reasoning,
    )


def map_created(value: Any) -> Optional[datetime]:
    seconds = to_int(value)
    if seconds <= 0:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _text_of(part: Mapping[str, Any]) -> str:
    for key in ("text", "thinking", "reasoning", "content"):
        value = part.get(key)
        if isinstance(value, str):
            return value
    return ""


def split_content(content: Any) -> Tuple[str, str, List[ContentPart]]:
    """Split wire content into ``(text, reasoning, image_parts)``.

    ``content`` may be a string, a single typed object or an array of typed
    objects (or plain strings).
    """
    if content is None:
        return "", "", []
    if isinstance(content, str):
        return content, "", []
    items = [content] if isinstance(content, Mapping) else content if isinstance(content, list) else []
    text: List[str] = []
    reasoning: List[str] = []
    images: List[ContentPart] = []
    for item in items:
        if isinstance(item, str):
            text.append(item)
            continue
        if not isinstance(item, Mapping):
            continue
        kind = item.get("type")
        if kind in REASONING_PART_TYPES:
            reasoning.append(_text_of(item))
        elif kind == "image_url":
            image = item.get("image_url")
            if isinstance(image, Mapping):
                images.append(ContentPart.image_part(str(image.get("url") or ""), image.get("detail") or None))
            elif isinstance(image, str):
                images.append(ContentPart.image_part(image))
        elif kind in (None, "text", "output_text"):
            text.append(_text_of(item))
    return "".join(text), "".join(reasoning), images


def message_reasoning(message: Mapping[str, Any]) -> str:
    """Message-level reasoning string (first non-empty known field)."""
    for key in REASONING_FIELDS:
        value = message.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def map_tool_calls(items: Any) -> List[ToolCall]:
    calls: List[ToolCall] = []
    if not isinstance(items, list):
        return calls
    for item in items:
        if not isinstance(item, Mapping):
            continue
        fn = item.get("function") if isinstance(item.get("function"), Mapping) else {}
        arguments = fn.get("arguments")
        if arguments is None:
            arguments_text = ""
        elif isinstance(arguments, str):
            arguments_text = arguments
        else:
            # Some backends (Ollama) send arguments as an object rather than a string.
            calls.append(ToolCall.from_arguments(str(item.get("id") or ""), str(fn.get("name") or ""), arguments))
            continue
        calls.append(ToolCall(id=str(item.get("id") or ""), name=str(fn.get("name") or ""), arguments_text=arguments_text))
    return calls


def map_message(payload: Any) -> Message:
    """Map a response ``message`` object into an assistant `Message`."""
    if not isinstance(payload, Mapping):
        return Message(role="assistant")
    text, inline_reasoning, images = split_content(payload.get("content"))
    reasoning = message_reasoning(payload) + inline_reasoning
    parts: List[ContentPart] = []
    if reasoning:
        parts.append(ContentPart.reasoning_part(reasoning))
    if text:
        parts.append(ContentPart.text_part(text))
    parts.extend(images)
    role = payload.get("role") if payload.get("role") in ("system", "user", "assistant", "tool") else "assistant"
    return Message(
        role=role,
        content=parts,
        name=payload.get("name") or None,
        tool_calls=map_tool_calls(payload.get("tool_calls")),
    )


def map_response(payload: Mapping[str, Any], raw: Optional[bytes] = None) -> ChatResponse:
    """Map a decoded non-streaming response body."""
    choices: List[Choice] = []
    for position, item in enumerate(payload.get("choices") or []):
        if not isinstance(item, Mapping):
            continue
        index = item.get("index")
        choices.append(
            Choice(
                index=to_int(index) if index is not None else position,
                message=map_message(item.get("message")),
                finish_reason=map_finish_reason(item.get("finish_reason")),
            )
        )
    choices.sort(key=lambda c: c.index)
    return ChatResponse(
        id=str(payload.get("id") or ""),
        model=str(payload.get("model") or ""),
        created_at=map_created(payload.get("created")),
        choices=choices,
        usage=map_usage(payload.get("usage")),
        raw=raw,
    )


__all__ = [
    "map_finish_reason",
    "map_usage",
    "map_created",
    "map_message",
    "map_tool_calls",
    "map_response",
    "message_reasoning",
    "split_content",
    "to_int",
]
