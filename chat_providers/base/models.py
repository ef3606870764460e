"""
Provider-agnostic domain models (DTOs) public surface.

This module re-exports the one-class-per-file implementations under
``chat_providers.base.models_parts`` so callers have a single stable import
path for messages, requests, responses and stream events.
"""

from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.tool_call import (
    ResponseFormat,
    StreamOptions,
    ToolCall,
    ToolChoice,
    ToolChoiceMode,
    ToolSpec,
)
from .models_parts.message import Message, Role
from .models_parts.chat_request import ChatRequest
from .models_parts.chat_response import ChatResponse, Choice, FinishReason, Usage
from .models_parts.stream_event import DeltaPartType, StreamEvent, StreamEventKind
from .models_parts.call_options import CallOptions

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
