"""
ChatRequest DTO for provider-agnostic chat invocations.

The wire mapper turns this normalized shape into an OpenAI-compatible JSON
body. Every sampling parameter is ``Optional`` so that "unset" stays
distinguishable from an explicit zero, and ``extra`` is the escape hatch for
provider-specific top-level keys.
"""
from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .message import Message
from .tool_call import ResponseFormat, StreamOptions, ToolChoice, ToolSpec


@dataclass
class ChatRequest:
    """Normalized chat request sent to provider adapters.

    Attributes:
        model: Target model identifier; falls back to the client default.
        messages: Ordered list of chat `Message` instances (non-empty at send time).
        temperature: Sampling temperature.
        top_p: Nucleus sampling mass.
        max_tokens: Maximum completion tokens.
        seed: Deterministic sampling seed.
        presence_penalty: Presence penalty.
        frequency_penalty: Frequency penalty.
        logprobs: Ask for token log probabilities.
        top_logprobs: Number of alternatives per position when ``logprobs`` is set.
        stop: Stop sequences.
        tools: Tools offered to the model.
        tool_choice: Tool selection policy.
        response_format: Output format hint.
        stream_options: Streaming flags (only sent on streaming calls).
        extra: Provider-specific top-level JSON keys merged after the standard mapping.
        allow_extra_override: Let ``extra`` replace keys produced by the standard mapping.

    Methods:
        clone: Return a deep copy that hooks may mutate freely.
        to_dict: Return a JSON-serializable dictionary of the request.
    """

    model: str = ""
    messages: List[Message] = field(default_factory=list)
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    seed: Optional[int] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = None
    stop: List[str] = field(default_factory=list)
    tools: List[ToolSpec] = field(default_factory=list)
    tool_choice: Optional[ToolChoice] = None
    response_format: Optional[ResponseFormat] = None
    stream_options: Optional[StreamOptions] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    allow_extra_override: bool = False

    def clone(self) -> "ChatRequest":
        """Return a deep, independent copy of the request."""
        return copy.deepcopy(self)

    def with_extra(self, **fields: Any) -> "ChatRequest":
        """Return a clone with ``fields`` merged into ``extra``."""
        out = self.clone()
        out.extra.update(fields)
        return out

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary with every field of the request."""
        return {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
            "temperature": self.temperature,
            "top_p": self.top_p,
            "max_tokens": self.max_tokens,
            "seed": self.seed,
            "presence_penalty": self.presence_penalty,
            "frequency_penalty": self.frequency_penalty,
            "logprobs": self.logprobs,
            "top_logprobs": self.top_logprobs,
            "stop": list(self.stop),
            "tools": [asdict(t) for t in self.tools],
            "tool_choice": asdict(self.tool_choice) if self.tool_choice else None,
            "response_format": asdict(self.response_format) if self.response_format else None,
            "stream_options": asdict(self.stream_options) if self.stream_options else None,
            "extra": copy.deepcopy(self.extra),
            "allow_extra_override": self.allow_extra_override,
        }


__all__ = [
    "ChatRequest",
]
