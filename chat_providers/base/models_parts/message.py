"""
Message DTO used across providers.

Defines the `Message` dataclass and the `Role` literal representing the sender
role. Content is an ordered list of `ContentPart` objects; a bare string is
accepted for convenience and normalized into a single text part. Helpers are
provided for building common messages and flattening text.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from .content_part import ContentPart
from .tool_call import ToolCall


# Message roles used across providers.
Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class Message:
    """A chat message used by provider-agnostic DTOs.

    Attributes:
        role: The role of the message author.
        content: Ordered content parts (text, reasoning, image, binary).
        name: Optional participant name.
        tool_call_id: Identifier of the call a ``tool`` message answers.
        tool_calls: Calls requested by an ``assistant`` message.

    Invariants:
        A ``tool`` message must carry ``tool_call_id`` (checked when a request
        is sent). An assistant message with tool calls may have no text.
    """

    role: Role
    content: Union[str, List[ContentPart]] = field(default_factory=list)
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.content, str):
            self.content = [ContentPart.text_part(self.content)] if self.content else []
        else:
            self.content = list(self.content)

    # ----- constructors -----
    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(role="system", content=text)

    @classmethod
    def user(cls, content: Union[str, Sequence[ContentPart]]) -> "Message":
        return cls(role="user", content=content if isinstance(content, str) else list(content))

    @classmethod
    def assistant(cls, text: str = "", tool_calls: Optional[Sequence[ToolCall]] = None) -> "Message":
        return cls(role="assistant", content=text, tool_calls=list(tool_calls or []))

    @classmethod
    def tool(cls, tool_call_id: str, text: str, name: Optional[str] = None) -> "Message":
        return cls(role="tool", content=text, tool_call_id=tool_call_id, name=name)

    # ----- views -----
    def text(self) -> str:
        """Return the concatenation of all text parts."""
        return "".join(p.text or "" for p in self.content if p.type == "text")

    def reasoning(self) -> str:
        """Return the concatenation of all reasoning parts."""
        return "".join(p.text or "" for p in self.content if p.type == "reasoning")

    def is_single_text(self) -> bool:
        """True when content is exactly one text part (serializes as a bare string)."""
        return len(self.content) == 1 and self.content[0].type == "text"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "role": self.role,
            "content": [p.to_dict() for p in self.content],
        }
        if self.name:
            out["name"] = self.name
        if self.tool_call_id:
            out["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            out["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        return out


__all__ = [
    "Message",
    "Role",
]
