"""
Stream event variant produced while decoding a chat completion stream.

Each decoded SSE payload becomes zero or more `StreamEvent` objects which the
stream accumulator folds into a final response. Events are transient and are
never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from .chat_response import FinishReason, Usage


class StreamEventKind(str, Enum):
    PART_DELTA = "part_delta"
    TOOL_CALL_DELTA = "tool_call_delta"
    CHOICE_DONE = "choice_done"
    USAGE = "usage"
    DONE = "done"


DeltaPartType = Literal["text", "reasoning"]


@dataclass(frozen=True)
class StreamEvent:
    """Tagged stream event.

    Fields used per kind:
        part_delta: ``choice_index``, ``part_type``, ``text``.
        tool_call_delta: ``choice_index``, ``tool_call_index``, ``tool_call_id``,
            ``tool_name``, ``arguments_delta``.
        choice_done: ``choice_index``, ``finish_reason``.
        usage: ``usage``.
        done: no payload; terminal marker.
    """

    kind: StreamEventKind
    choice_index: int = 0
    part_type: DeltaPartType = "text"
    text: str = ""
    tool_call_index: int = 0
    tool_call_id: str = ""
    tool_name: str = ""
    arguments_delta: str = ""
    finish_reason: Optional[FinishReason] = None
    usage: Optional[Usage] = None

    @classmethod
    def text_delta(cls, text: str, choice_index: int = 0) -> "StreamEvent":
        return cls(kind=StreamEventKind.PART_DELTA, choice_index=choice_index, part_type="text", text=text)

    @classmethod
    def reasoning_delta(cls, text: str, choice_index: int = 0) -> "StreamEvent":
        return cls(kind=StreamEventKind.PART_DELTA, choice_index=choice_index, part_type="reasoning", text=text)

    @classmethod
    def tool_call_delta(
        cls,
        *,
        choice_index: int = 0,
        index: int = 0,
        id: str = "",
        name: str = "",
        arguments: str = "",
    ) -> "StreamEvent":
        return cls(
            kind=StreamEventKind.TOOL_CALL_DELTA,
            choice_index=choice_index,
            tool_call_index=index,
            tool_call_id=id,
            tool_name=name,
            arguments_delta=arguments,
        )

    @classmethod
    def choice_done(cls, finish_reason: FinishReason, choice_index: int = 0) -> "StreamEvent":
        return cls(kind=StreamEventKind.CHOICE_DONE, choice_index=choice_index, finish_reason=finish_reason)

    @classmethod
    def usage_event(cls, usage: Usage) -> "StreamEvent":
        return cls(kind=StreamEventKind.USAGE, usage=usage)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(kind=StreamEventKind.DONE)

    @property
    def is_done(self) -> bool:
        return self.kind is StreamEventKind.DONE


__all__ = [
    "StreamEvent",
    "StreamEventKind",
    "DeltaPartType",
]
