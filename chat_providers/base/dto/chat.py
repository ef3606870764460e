"""
Pydantic DTOs validating plain-mapping chat requests.

Purpose
-------
``OpenAICompatClient.chat`` and ``stream_chat`` accept either a `ChatRequest`
dataclass or a plain mapping (for example, a JSON body received by an
application). Mappings are validated here and converted with
``ChatRequestDTO.to_request()``, so malformed input fails with a
``pydantic.ValidationError`` before any network I/O.

Design
------
- Field names and shapes mirror ``chat_providers.base.models``.
- Bounds are checked where the OpenAI dialect defines them (temperature,
  top_p, penalties, token counts).
- ``model`` may be omitted; the client's default model is used then.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import (
    ChatRequest,
    ContentPart,
    Message,
    ResponseFormat,
    StreamOptions,
    ToolCall,
    ToolChoice,
    ToolSpec,
)


Role = Literal["system", "user", "assistant", "tool"]


class ContentPartDTO(BaseModel):
    """A typed content part.

    ``data`` for ``binary`` parts is base64 text (JSON has no bytes type).
    """

    model_config = ConfigDict(extra="forbid")

    type: Literal["text", "reasoning", "image_url", "binary"]
    text: Optional[str] = None
    url: Optional[str] = None
    detail: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[str] = None

    @model_validator(mode="after")
    def _validate_payload(self) -> "ContentPartDTO":
        if self.type == "image_url" and not self.url:
            raise ValueError("image_url part requires url")
        if self.type == "binary" and not (self.mime_type and self.data):
            raise ValueError("binary part requires mime_type and data")
        return self

    def to_part(self) -> ContentPart:
        if self.type == "image_url":
            return ContentPart.image_part(self.url or "", self.detail)
        if self.type == "binary":
            return ContentPart.binary_part(self.mime_type or "", base64.b64decode(self.data or ""))
        if self.type == "reasoning":
            return ContentPart.reasoning_part(self.text or "")
        return ContentPart.text_part(self.text or "")


class ToolCallDTO(BaseModel):
    id: str = ""
    name: str = Field(..., min_length=1)
    arguments: Union[str, Dict[str, Any], None] = None

    def to_tool_call(self) -> ToolCall:
        if isinstance(self.arguments, dict):
            return ToolCall.from_arguments(self.id, self.name, self.arguments)
        return ToolCall(id=self.id, name=self.name, arguments_text=self.arguments or "")


class MessageDTO(BaseModel):
    """A chat message with either a text string or typed parts.

    Rules:
        - ``tool`` messages require ``tool_call_id``.
        - ``tool_call_id`` is only valid on ``tool`` messages and
          ``tool_calls`` only on ``assistant`` messages.
        - Content may be empty only for an assistant message carrying tool calls.
    """

    role: Role
    content: Union[str, List[ContentPartDTO]] = ""
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: List[ToolCallDTO] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_roles(self) -> "MessageDTO":
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("tool message requires tool_call_id")
        if self.tool_call_id and self.role != "tool":
            raise ValueError("tool_call_id is only valid on tool messages")
        if self.tool_calls and self.role != "assistant":
            raise ValueError("tool_calls are only valid on assistant messages")
        empty = self.content == "" or self.content == []
        if empty and not self.tool_calls:
            raise ValueError("message content must be non-empty")
        return self

    def to_message(self) -> Message:
        content: Union[str, List[ContentPart]]
        if isinstance(self.content, str):
            content = self.content
        else:
            content = [p.to_part() for p in self.content]
        return Message(
            role=self.role,
            content=content,
            name=self.name,
            tool_call_id=self.tool_call_id,
            tool_calls=[tc.to_tool_call() for tc in self.tool_calls],
        )


class ToolSpecDTO(BaseModel):
    """Function tool offered to the model."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    strict: bool = False


class ToolChoiceDTO(BaseModel):
    mode: Literal["auto", "none", "required", "function"] = "auto"
    function_name: Optional[str] = None

    @model_validator(mode="after")
    def _validate_function(self) -> "ToolChoiceDTO":
        if self.mode == "function" and not self.function_name:
            raise ValueError("tool_choice mode 'function' requires function_name")
        return self


class ResponseFormatDTO(BaseModel):
    type: Literal["text", "json_object", "json_schema"] = "text"
    json_schema: Optional[Dict[str, Any]] = None


class ChatRequestDTO(BaseModel):
    """Validated chat request.

    Raises:
        ValidationError: On invalid roles, empty content, or out-of-range params.
    """

    model: str = ""
    messages: List[MessageDTO] = Field(..., min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    seed: Optional[int] = None
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = Field(default=None, ge=0, le=20)
    stop: List[str] = Field(default_factory=list)
    tools: List[ToolSpecDTO] = Field(default_factory=list)
    tool_choice: Union[Literal["auto", "none", "required"], ToolChoiceDTO, None] = None
    response_format: Union[Literal["text", "json_object"], ResponseFormatDTO, None] = None
    include_usage: Optional[bool] = None
    extra: Dict[str, Any] = Field(default_factory=dict)
    allow_extra_override: bool = False

    def to_request(self) -> ChatRequest:
        """Convert into the engine's `ChatRequest` dataclass."""
        tool_choice: Optional[ToolChoice] = None
        if isinstance(self.tool_choice, str):
            tool_choice = ToolChoice(mode=self.tool_choice)
        elif self.tool_choice is not None:
            tool_choice = ToolChoice(mode=self.tool_choice.mode, function_name=self.tool_choice.function_name)
        response_format: Optional[ResponseFormat] = None
        if isinstance(self.response_format, str):
            response_format = ResponseFormat(type=self.response_format)
        elif self.response_format is not None:
            response_format = ResponseFormat(
                type=self.response_format.type,
                json_schema=self.response_format.json_schema,
            )
        return ChatRequest(
            model=self.model,
            messages=[m.to_message() for m in self.messages],
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
            seed=self.seed,
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
            logprobs=self.logprobs,
            top_logprobs=self.top_logprobs,
            stop=list(self.stop),
            tools=[
                ToolSpec(name=t.name, description=t.description, parameters=t.parameters, strict=t.strict)
                for t in self.tools
            ],
            tool_choice=tool_choice,
            response_format=response_format,
            stream_options=StreamOptions(include_usage=self.include_usage) if self.include_usage is not None else None,
            extra=dict(self.extra),
            allow_extra_override=self.allow_extra_override,
        )


def request_from_mapping(data: Dict[str, Any]) -> ChatRequest:
    """Validate ``data`` and return the equivalent `ChatRequest`."""
    return ChatRequestDTO.model_validate(data).to_request()


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
