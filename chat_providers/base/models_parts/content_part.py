"""
Content part model for chat messages.

This module defines the `ContentPart` dataclass and its associated
`ContentPartType` literal. A message is an ordered list of parts so that
multimodal input (text plus images or raw binary payloads) and the separate
reasoning channel emitted by "thinking" models share one normalized shape.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional


# Known content part types.
ContentPartType = Literal[
    "text",        # Plain text content
    "reasoning",   # Model reasoning / thinking channel
    "image_url",   # Image reference by URL (http(s) or data: URL)
    "binary",      # Raw bytes with a MIME type (sent as a base64 data URL)
]


@dataclass
class ContentPart:
    """A single piece of message content.

    Attributes:
        type: The semantic kind of the part.
        text: Text for ``text`` and ``reasoning`` parts.
        url: Image location for ``image_url`` parts.
        detail: Optional image detail hint (``"low"``, ``"high"``, ``"auto"``).
        mime_type: MIME type for ``binary`` parts.
        data: Raw payload for ``binary`` parts.

    Methods:
        text_part / reasoning_part / image_part / binary_part: constructors.
        data_url: Return a ``data:`` URL for binary parts.
        to_dict: Return a JSON-serializable dictionary representation.
    """

    type: ContentPartType
    text: Optional[str] = None
    url: Optional[str] = None
    detail: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[bytes] = None

    @classmethod
    def text_part(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def reasoning_part(cls, text: str) -> "ContentPart":
        return cls(type="reasoning", text=text)

    @classmethod
    def image_part(cls, url: str, detail: Optional[str] = None) -> "ContentPart":
        return cls(type="image_url", url=url, detail=detail)

    @classmethod
    def binary_part(cls, mime_type: str, data: bytes) -> "ContentPart":
        return cls(type="binary", mime_type=mime_type, data=data)

    def data_url(self) -> str:
        """Return the part payload encoded as a base64 ``data:`` URL."""
        encoded = base64.b64encode(self.data or b"").decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary, dropping unset fields."""
        out: Dict[str, Any] = {"type": self.type}
        for key in ("text", "url", "detail", "mime_type"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.data is not None:
            out["data"] = base64.b64encode(self.data).decode("ascii")
        return out


__all__ = [
    "ContentPart",
    "ContentPartType",
]
