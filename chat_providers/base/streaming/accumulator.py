"""Stream accumulator folding `StreamEvent`s into a `ChatResponse`.

The fold is keyed by choice index so interleaved choices are reassembled
independently. Tool-call deltas are positional: the first delta for an index
opens the slot, ``id``/``name`` stick on first non-empty arrival and argument
fragments always append.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ..models import (
    ChatResponse,
    Choice,
    ContentPart,
    FinishReason,
    Message,
    StreamEvent,
    StreamEventKind,
    ToolCall,
    Usage,
)


@dataclass
class _ToolSlot:
    id: str = ""
    name: str = ""
    arguments: List[str] = field(default_factory=list)


@dataclass
class _ChoiceState:
    text: List[str] = field(default_factory=list)
    reasoning: List[str] = field(default_factory=list)
    tools: Dict[int, _ToolSlot] = field(default_factory=dict)
    finish_reason: Optional[FinishReason] = None


class StreamAccumulator:
    """Deterministic fold of stream events.

    ``response()`` may be called at any point (partial result) and is free of
    side effects: the returned object shares no mutable state with the
    accumulator.
    """

    def __init__(self) -> None:
        self._choices: Dict[int, _ChoiceState] = {}
        self._usage: Optional[Usage] = None
        self._id = ""
        self._model = ""
        self._created_at: Optional[datetime] = None
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def set_metadata(
        self,
        id: str = "",
        model: str = "",
        created_at: Optional[datetime] = None,
    ) -> None:
        """Record response metadata; the first non-empty value of each field wins."""
        if id and not self._id:
            self._id = id
        if model and not self._model:
            self._model = model
        if created_at is not None and self._created_at is None:
            self._created_at = created_at

    def add(self, event: StreamEvent) -> None:
        kind = event.kind
        if kind is StreamEventKind.DONE:
            self._done = True
            return
        if kind is StreamEventKind.USAGE:
            if event.usage is not None:
                self._usage = copy.copy(event.usage)
            return
        state = self._choices.setdefault(event.choice_index, _ChoiceState())
        if kind is StreamEventKind.PART_DELTA:
            if event.part_type == "reasoning":
                state.reasoning.append(event.text)
            else:
                state.text.append(event.text)
        elif kind is StreamEventKind.TOOL_CALL_DELTA:
            slot = state.tools.setdefault(event.tool_call_index, _ToolSlot())
            if event.tool_call_id and not slot.id:
                slot.id = event.tool_call_id
            if event.tool_name and not slot.name:
                slot.name = event.tool_name
            if event.arguments_delta:
                slot.arguments.append(event.arguments_delta)
        elif kind is StreamEventKind.CHOICE_DONE:
            if state.finish_reason is None:
                state.finish_reason = event.finish_reason

    def response(self) -> ChatResponse:
        """Build the (partial or final) response from everything folded so far."""
        choices = [self._build_choice(index, self._choices[index]) for index in sorted(self._choices)]
        return ChatResponse(
            id=self._id,
            model=self._model,
            created_at=self._created_at,
            choices=choices,
            usage=copy.copy(self._usage),
        )

    @staticmethod
    def _build_choice(index: int, state: _ChoiceState) -> Choice:
        content: List[ContentPart] = []
        reasoning = "".join(state.reasoning)
        text = "".join(state.text)
        if reasoning:
            content.append(ContentPart.reasoning_part(reasoning))
        if text:
            content.append(ContentPart.text_part(text))
        tool_calls = [
            ToolCall(id=slot.id, name=slot.name, arguments_text="".join(slot.arguments))
            for _, slot in sorted(state.tools.items())
        ]
        message = Message(role="assistant", content=content, tool_calls=tool_calls)
        return Choice(index=index, message=message, finish_reason=state.finish_reason)


__all__ = ["StreamAccumulator"]
