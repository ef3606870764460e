"""
Request direction of the wire mapper: `ChatRequest` -> OpenAI chat JSON.

Optional scalars are emitted only when explicitly set, so ``temperature=0.0``
reaches the provider while an unset temperature is left to the provider's
default. ``extra`` keys merge last and may not silently replace a mapped key.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..base.errors import ErrorCode, FieldConflictError, ProviderError
from ..base.models import (
    ChatRequest,
    ContentPart,
    Message,
    ResponseFormat,
    ToolCall,
    ToolChoice,
    ToolSpec,
)
from .adapter import ProviderAdapter

# Optional scalar request fields, emitted under the same key when not None.
_SCALAR_FIELDS = (
    "temperature",
    "top_p",
    "max_tokens",
    "seed",
    "presence_penalty",
    "frequency_penalty",
    "logprobs",
    "top_logprobs",
)


def _bad_request(message: str, provider: str, model: Optional[str] = None) -> ProviderError:
    return ProviderError(
        code=ErrorCode.BAD_REQUEST,
        message=message,
        provider=provider,
        model=model,
        retryable=False,
    )


def validate_request(request: ChatRequest, provider: str = "") -> None:
    """Check send-time invariants; raise a ``bad_request`` `ProviderError` on violation."""
    if not request.model:
        raise _bad_request("model is required (set it on the request or as the client default)", provider)
    if not request.messages:
        raise _bad_request("at least one message is required", provider, request.model)
    for i, message in enumerate(request.messages):
        if message.role == "tool" and not message.tool_call_id:
            raise _bad_request(f"messages[{i}]: tool message requires tool_call_id", provider, request.model)


def map_content_part(part: ContentPart, provider: str = "") -> Optional[Dict[str, Any]]:
    """Map one content part; reasoning parts are dropped (``None``)."""
    if part.type == "text":
        return {"type": "text", "text": part.text or ""}
    if part.type == "image_url":
        image: Dict[str, Any] = {"url": part.url or ""}
        if part.detail and part.detail.strip():
            image["detail"] = part.detail
        return {"type": "image_url", "image_url": image}
    if part.type == "binary":
        if not (part.mime_type or "").strip():
            raise _bad_request("binary content part requires a mime type", provider)
        if not part.data:
            raise _bad_request("binary content part requires data", provider)
        return {"type": "image_url", "image_url": {"url": part.data_url()}}
    if part.type == "reasoning":
        return None
    raise _bad_request(f"unsupported content part type {part.type!r}", provider)


def map_tool_call(call: ToolCall) -> Dict[str, Any]:
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": call.arguments_text},
    }


def map_message(message: Message, provider: str = "") -> Dict[str, Any]:
    """Map one message: a lone text part becomes a bare string, no content becomes ``""``."""
    out: Dict[str, Any] = {"role": message.role}
    if message.name:
        out["name"] = message.name
    if message.role == "tool" and message.tool_call_id:
        out["tool_call_id"] = message.tool_call_id

    parts = [p for p in message.content if p.type != "reasoning"]
    if len(parts) == 1 and parts[0].type == "text":
        out["content"] = parts[0].text or ""
    elif parts:
        mapped = [map_content_part(p, provider) for p in parts]
        out["content"] = [m for m in mapped if m is not None]
    else:
        out["content"] = ""

    if message.role == "assistant" and message.tool_calls:
        out["tool_calls"] = [map_tool_call(tc) for tc in message.tool_calls]
    return out


def map_tool(tool: ToolSpec) -> Dict[str, Any]:
    fn: Dict[str, Any] = {"name": tool.name}
    if tool.description:
        fn["description"] = tool.description
    if tool.parameters:
        fn["parameters"] = tool.parameters
    if tool.strict:
        fn["strict"] = True
    return {"type": "function", "function": fn}


def map_tool_choice(choice: ToolChoice, provider: str = "") -> Any:
    if choice.mode in ("none", "auto", "required"):
        return choice.mode
    if not choice.function_name:
        raise _bad_request("tool_choice function requires a name", provider)
    return {"type": "function", "function": {"name": choice.function_name}}


def map_response_format(fmt: ResponseFormat) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": fmt.type}
    if fmt.json_schema:
        out["json_schema"] = fmt.json_schema
    return out


def map_request(
    request: ChatRequest,
    *,
    stream: bool = False,
    adapter: Optional[ProviderAdapter] = None,
    provider: str = "",
    default_model: str = "",
    allow_extra_override: bool = False,
) -> Dict[str, Any]:
    """Map a request to the JSON body for ``/chat/completions``.

    The caller's request is not modified: ``before_map`` runs on a clone and
    ``patch_request`` on the produced dict.

    Raises:
        ProviderError: ``bad_request`` for send-time invariant violations.
        FieldConflictError: an ``extra`` key collides with a mapped key and
            neither the request nor the client allows overriding.
    """
    adapter = adapter or ProviderAdapter()
    req = request.clone()
    if not req.model:
        req.model = default_model
    adapter.before_map(req)
    validate_request(req, provider)

    body: Dict[str, Any] = {
        "model": req.model,
        "messages": [map_message(m, provider) for m in req.messages],
    }
    for name in _SCALAR_FIELDS:
        value = getattr(req, name)
        if value is not None:
            body[name] = value
    if req.stop:
        body["stop"] = list(req.stop)
    if req.tools:
        body["tools"] = [map_tool(t) for t in req.tools]
    if req.tool_choice is not None:
        body["tool_choice"] = map_tool_choice(req.tool_choice, provider)
    if req.response_format is not None:
        body["response_format"] = map_response_format(req.response_format)
    if stream:
        body["stream"] = True
        if req.stream_options is not None:
            body["stream_options"] = {"include_usage": req.stream_options.include_usage}

    allow_override = req.allow_extra_override or allow_extra_override
    for key, value in req.extra.items():
        if key in body and not allow_override:
            raise FieldConflictError(key, provider=provider, model=req.model)
        body[key] = value

    adapter.patch_request(body)
    return body


__all__ = [
    "validate_request",
    "map_content_part",
    "map_message",
    "map_tool",
    "map_tool_call",
    "map_tool_choice",
    "map_response_format",
    "map_request",
]
