"""
Providers Base Package

Provider-agnostic building blocks of the chat engine:
- Models: canonical request/response/stream-event dataclasses
- Errors: closed error taxonomy and classification helpers
- Streaming: SSE decoding, event accumulation and the chat stream
- Resilience: retrying executor, backoff, rate limiting
- Timeouts & Cancellation: deadlines and cooperative cancellation tokens
- Factory: lazy creation of provider clients by canonical name
"""

from .cancellation import CancellationToken, CancelledError
from .errors import (
    BodyNotReplayableError,
    ErrorCode,
    FieldConflictError,
    ProviderError,
    classify_status,
)
from .factory import ProviderFactory, UnknownProviderError, create
from .models import (
    CallOptions,
    ChatRequest,
    ChatResponse,
    Choice,
    ContentPart,
    ContentPartType,
    FinishReason,
    Message,
    ResponseFormat,
    Role,
    StreamEvent,
    StreamEventKind,
    StreamOptions,
    ToolCall,
    ToolChoice,
    ToolSpec,
    Usage,
)
from .resilience import RetryConfig, RetryingExecutor, TokenBucketRateLimiter
from .streaming import ChatStream, SSEDecoder, StreamAccumulator
from .timeouts import Deadline, DeadlineExceeded, TimeoutConfig, get_timeout_config

__all__ = [
    # Models
    "Role",
    "ContentPartType",
    "ContentPart",
    "Message",
    "ToolCall",
    "ToolSpec",
    "ToolChoice",
    "ResponseFormat",
    "StreamOptions",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "FinishReason",
    "Usage",
    "StreamEvent",
    "StreamEventKind",
    "CallOptions",
    # Errors
    "ErrorCode",
    "ProviderError",
    "FieldConflictError",
    "BodyNotReplayableError",
    "classify_status",
    # Factory
    "ProviderFactory",
    "UnknownProviderError",
    "create",
    # Streaming
    "ChatStream",
    "SSEDecoder",
    "StreamAccumulator",
    # Resilience
    "RetryConfig",
    "RetryingExecutor",
    "TokenBucketRateLimiter",
    # Timeouts & Cancellation
    "TimeoutConfig",
    "get_timeout_config",
    "Deadline",
    "DeadlineExceeded",
    "CancellationToken",
    "CancelledError",
]
