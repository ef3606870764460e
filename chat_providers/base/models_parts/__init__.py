"""Models parts package public surface.

Re-exports individual DTOs so callers can import from
`chat_providers.base.models_parts` if needed, while `chat_providers.base.models`
remains the primary stable import path.
"""

from .content_part import ContentPart, ContentPartType
from .tool_call import ResponseFormat, StreamOptions, ToolCall, ToolChoice, ToolChoiceMode, ToolSpec
from .message import Message, Role
from .chat_request import ChatRequest
from .chat_response import ChatResponse, Choice, FinishReason, Usage
from .stream_event import DeltaPartType, StreamEvent, StreamEventKind
from .call_options import CallOptions

__all__ = [
    "ContentPart",
    "ContentPartType",
    "ToolCall",
    "ToolSpec",
    "ToolChoice",
    "ToolChoiceMode",
    "ResponseFormat",
    "StreamOptions",
    "Message",
    "Role",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "FinishReason",
    "Usage",
    "StreamEvent",
    "StreamEventKind",
    "DeltaPartType",
    "CallOptions",
]
