"""DTO validation package for chat requests."""

from .chat import (
    ChatRequestDTO,
    ContentPartDTO,
    MessageDTO,
    ResponseFormatDTO,
    Role,
    ToolCallDTO,
    ToolChoiceDTO,
    ToolSpecDTO,
    request_from_mapping,
)

__all__ = [
    "Role",
    "ContentPartDTO",
    "ToolCallDTO",
    "MessageDTO",
    "ToolSpecDTO",
    "ToolChoiceDTO",
    "ResponseFormatDTO",
    "ChatRequestDTO",
    "request_from_mapping",
]
