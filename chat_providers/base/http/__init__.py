"""HTTP utilities package.

Exposes the transport abstraction used by the retrying executor (with its
pooled httpx clients) and shared header helpers.
"""

from .headers import (
    IDEMPOTENCY_KEY_HEADER,
    REQUEST_ID_HEADER,
    new_request_id,
    parse_retry_after,
)
from .transport import (
    BytesBody,
    HttpRequest,
    HttpResponse,
    HttpxStreamingResponse,
    HttpxTransport,
    StreamBody,
    StreamingHttpResponse,
    Transport,
    close_all_clients,
    pooled_client,
)

__all__ = [
    "pooled_client",
    "close_all_clients",
    "IDEMPOTENCY_KEY_HEADER",
    "REQUEST_ID_HEADER",
    "new_request_id",
    "parse_retry_after",
    "BytesBody",
    "StreamBody",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "HttpxStreamingResponse",
    "StreamingHttpResponse",
    "Transport",
]
