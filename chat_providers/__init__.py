"""chat_providers package

Provider-agnostic chat client for backends speaking the OpenAI
chat-completions dialect (OpenAI, DeepSeek, Qwen/DashScope, Kimi/Moonshot,
Ollama).

Public API (re-exported):
    - Version: ``__version__``
    - Factory: :func:`create` (``create('deepseek').chat(...)``)
    - Client: :class:`OpenAICompatClient`, :class:`ChatStream`
    - Models: :class:`ChatRequest`, :class:`Message`, :class:`ContentPart`,
      :class:`ToolCall`, :class:`ChatResponse`, :class:`StreamEvent`,
      :class:`CallOptions`
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode`,
      :class:`UnknownProviderError`
"""

from .base.cancellation import CancellationToken
from .base.errors import ErrorCode, ProviderError
from .base.factory import ProviderFactory, UnknownProviderError, create
from .base.models import (
    CallOptions,
    ChatRequest,
    ChatResponse,
    ContentPart,
    FinishReason,
    Message,
    ResponseFormat,
    StreamEvent,
    StreamEventKind,
    ToolCall,
    ToolChoice,
    ToolSpec,
    Usage,
)
from .base.streaming import ChatStream
from .openai_compat import OpenAICompatClient, ProviderAdapter

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Factory & client
    "create",
    "ProviderFactory",
    "OpenAICompatClient",
    "ProviderAdapter",
    "ChatStream",
    # Models
    "ChatRequest",
    "ChatResponse",
    "Message",
    "ContentPart",
    "ToolCall",
    "ToolSpec",
    "ToolChoice",
    "ResponseFormat",
    "FinishReason",
    "Usage",
    "StreamEvent",
    "StreamEventKind",
    "CallOptions",
    "CancellationToken",
    # Exceptions
    "ProviderError",
    "ErrorCode",
    "UnknownProviderError",
]
