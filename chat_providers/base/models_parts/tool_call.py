"""
Tool calling DTOs.

`ToolCall` is what a model emits when it decides to invoke a function; the
raw argument string is the source of truth because streaming providers
deliver it in fragments. `ToolSpec` and `ToolChoice` describe the tools a
request offers and how the model may pick among them.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional


@dataclass
class ToolCall:
    """A function invocation requested by the model.

    Attributes:
        id: Provider-assigned call identifier (echoed back in tool messages).
        name: Function name.
        arguments_text: Raw JSON argument string as accumulated from the wire.

    The parsed view ``arguments`` is derived from ``arguments_text`` so the
    two can never disagree: it is ``None`` while the text is empty or not yet
    valid JSON.
    """

    id: str = ""
    name: str = ""
    arguments_text: str = ""

    @classmethod
    def from_arguments(cls, id: str, name: str, arguments: Any) -> "ToolCall":
        """Build a tool call from an already-parsed arguments value."""
        return cls(id=id, name=name, arguments_text=json.dumps(arguments, ensure_ascii=False))

    @property
    def arguments(self) -> Any:
        """Parsed arguments or ``None`` when ``arguments_text`` is not valid JSON."""
        if not self.arguments_text.strip():
            return None
        try:
            return json.loads(self.arguments_text)
        except json.JSONDecodeError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "arguments_text": self.arguments_text,
            "arguments": self.arguments,
        }


@dataclass
class ToolSpec:
    """A function tool offered to the model.

    Attributes:
        name: Function name.
        description: Optional human-readable description.
        parameters: Optional JSON Schema describing the arguments object.
        strict: Request strict schema adherence where the provider supports it.
    """

    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    strict: bool = False


ToolChoiceMode = Literal["auto", "none", "required", "function"]


@dataclass
class ToolChoice:
    """Controls whether and which tool the model should call."""

    mode: ToolChoiceMode = "auto"
    function_name: Optional[str] = None

    @classmethod
    def function(cls, name: str) -> "ToolChoice":
        return cls(mode="function", function_name=name)


@dataclass
class ResponseFormat:
    """Response format hint (``text``, ``json_object`` or ``json_schema``)."""

    type: str = "text"
    json_schema: Optional[Dict[str, Any]] = None


@dataclass
class StreamOptions:
    """Streaming behaviour flags; ``include_usage`` asks for a final usage chunk."""

    include_usage: bool = False


__all__ = [
    "ToolCall",
    "ToolSpec",
    "ToolChoice",
    "ToolChoiceMode",
    "ResponseFormat",
    "StreamOptions",
]
