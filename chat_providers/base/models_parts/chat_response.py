"""
ChatResponse DTO representing normalized provider responses.

A response carries one `Choice` per generated candidate, token `Usage`, and
optionally the raw payload bytes for forward compatibility. The ``raw`` field
is excluded from default serialization so large payloads are not logged or
persisted unintentionally.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .message import Message
from .tool_call import ToolCall


class FinishReason(str, Enum):
    """Why the model stopped generating. Absence of a reason is ``None``."""

    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    UNKNOWN = "unknown"


@dataclass
class Usage:
    """Token accounting for one call.

    ``cached_tokens`` / ``cache_miss_tokens`` describe prompt cache hits where
    the provider reports them; ``reasoning_tokens`` is the share of completion
    tokens spent on reasoning.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cached_tokens: int = 0
    cache_miss_tokens: int = 0
    reasoning_tokens: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "cached_tokens": self.cached_tokens,
            "cache_miss_tokens": self.cache_miss_tokens,
            "reasoning_tokens": self.reasoning_tokens,
        }


@dataclass
class Choice:
    """One generated candidate."""

    index: int
    message: Message
    finish_reason: Optional[FinishReason] = None


@dataclass
class ChatResponse:
    """Provider-agnostic response from a chat invocation.

    Attributes:
        id: Provider response identifier.
        model: Model that served the call.
        created_at: Creation time (UTC) when the provider reports one.
        choices: Candidates ordered by index.
        usage: Token usage, when reported.
        raw: Raw payload bytes (diagnostics / forward compatibility).
        extra: Provider-specific fields filled by response-enrichment hooks.
    """

    id: str = ""
    model: str = ""
    created_at: Optional[datetime] = None
    choices: List[Choice] = field(default_factory=list)
    usage: Optional[Usage] = None
    raw: Optional[bytes] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def first_choice(self) -> Optional[Choice]:
        return self.choices[0] if self.choices else None

    def first_text(self) -> str:
        """Text of the first choice, or ``""`` when there is none."""
        choice = self.first_choice()
        return choice.message.text() if choice else ""

    def first_reasoning(self) -> str:
        choice = self.first_choice()
        return choice.message.reasoning() if choice else ""

    def tool_calls(self) -> List[ToolCall]:
        """Tool calls requested by the first choice."""
        choice = self.first_choice()
        return list(choice.message.tool_calls) if choice else []

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary excluding the raw payload."""
        return {
            "id": self.id,
            "model": self.model,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "choices": [
                {
                    "index": c.index,
                    "message": c.message.to_dict(),
                    "finish_reason": c.finish_reason.value if c.finish_reason else None,
                }
                for c in self.choices
            ],
            "usage": self.usage.to_dict() if self.usage else None,
            "extra": dict(self.extra),
        }


__all__ = [
    "ChatResponse",
    "Choice",
    "FinishReason",
    "Usage",
]
