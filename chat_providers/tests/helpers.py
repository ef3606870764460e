"""Shared builders for chat_providers tests: SSE bodies, response bodies, a recording sleeper."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional


class RecordingSleeper:
    """Sleeper that records requested delays instead of blocking."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float, token=None) -> None:
        self.delays.append(seconds)
        if token is not None:
            token.raise_if_cancelled()


def sse_body(*payloads: Any, done: bool = True) -> bytes:
    """Render payloads (dicts are JSON-encoded) as an SSE body."""
    out = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        out.append(f"data: {data}\n\n")
    if done:
        out.append("data: [DONE]\n\n")
    return "".join(out).encode("utf-8")


def chunk(
    delta: Optional[Dict[str, Any]] = None,
    *,
    finish_reason: Optional[str] = None,
    index: int = 0,
    id: str = "chatcmpl-s1",
    model: str = "test-model",
    usage: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """One ``chat.completion.chunk`` object with a single choice."""
    body: Dict[str, Any] = {
        "id": id,
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": model,
        "choices": [{"index": index, "delta": delta or {}, "finish_reason": finish_reason}],
    }
    if usage is not None:
        body["usage"] = usage
    return body


def completion(
    text: str = "hello",
    *,
    id: str = "chatcmpl-1",
    model: str = "test-model",
    finish_reason: str = "stop",
    usage: Optional[Dict[str, Any]] = None,
    **message_fields: Any,
) -> Dict[str, Any]:
    """A minimal non-streaming chat-completions response body."""
    message: Dict[str, Any] = {"role": "assistant", "content": text}
    message.update(message_fields)
    body: Dict[str, Any] = {
        "id": id,
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
    }
    if usage is not None:
        body["usage"] = usage
    return body
