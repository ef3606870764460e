"""DeepSeek preset for the OpenAI-compatible chat engine.

DeepSeek speaks the chat-completions dialect at ``/chat/completions`` (no
``/v1`` prefix) and streams reasoning through ``reasoning_content``, which the
shared mappers already route to the reasoning channel. The only request-side
difference is the ``thinking`` toggle::

    {"thinking": {"type": "enabled"}}   # or "disabled"

It can be set per request with :func:`with_thinking` or as a client default
with ``create_client(thinking=True)``; a per-request value always wins.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..base.models import ChatRequest
from ..openai_compat import OpenAICompatClient, ProviderAdapter, chain_adapters, client_from_config

PROVIDER_NAME = "deepseek"
THINKING_FIELD = "thinking"


def thinking_value(enabled: bool) -> Dict[str, str]:
    return {"type": "enabled" if enabled else "disabled"}


def with_thinking(request: ChatRequest, enabled: bool) -> ChatRequest:
    """Return a copy of ``request`` with the DeepSeek ``thinking`` toggle set."""
    return request.with_extra(**{THINKING_FIELD: thinking_value(enabled)})


class DeepSeekAdapter(ProviderAdapter):
    """Applies the client-level ``thinking`` default when a request has none."""

    name = PROVIDER_NAME

    def __init__(self, thinking: Optional[bool] = None) -> None:
        self.thinking = thinking

    def before_map(self, request: ChatRequest) -> None:
        if self.thinking is not None:
            request.extra.setdefault(THINKING_FIELD, thinking_value(self.thinking))


def create_client(
    *,
    thinking: Optional[bool] = None,
    adapter: Optional[ProviderAdapter] = None,
    **overrides: Any,
) -> OpenAICompatClient:
    """Build a DeepSeek client from merged configuration.

    ``overrides`` accepts configuration keys (``api_key``, ``model``,
    ``base_url``, ``timeout``, ``retry``...) and client runtime objects
    (``transport``, ``rng``, ``sleeper``...). ``adapter`` runs after the
    DeepSeek hooks.
    """
    return client_from_config(
        PROVIDER_NAME,
        adapter=chain_adapters(DeepSeekAdapter(thinking), adapter),
        **overrides,
    )


__all__ = [
    "PROVIDER_NAME",
    "DeepSeekAdapter",
    "create_client",
    "thinking_value",
    "with_thinking",
]
