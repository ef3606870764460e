"""OpenAI-compatible chat engine: wire mappers, adapter hooks and the client."""

from .adapter import ChainedAdapter, HookAdapter, ProviderAdapter, chain_adapters
from .builder import client_from_config
from .chunk_mapper import map_chunk
from .client import DEFAULT_CHAT_PATH, OpenAICompatClient, join_url
from .request_mapper import map_request, validate_request
from .response_mapper import map_finish_reason, map_response, map_usage, split_content

__all__ = [
    "ProviderAdapter",
    "HookAdapter",
    "ChainedAdapter",
    "chain_adapters",
    "OpenAICompatClient",
    "DEFAULT_CHAT_PATH",
    "join_url",
    "map_request",
    "validate_request",
    "map_response",
    "map_usage",
    "map_finish_reason",
    "split_content",
    "map_chunk",
    "client_from_config",
]
