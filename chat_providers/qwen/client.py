"""Qwen (DashScope compatible mode) preset.

DashScope serves the OpenAI dialect under ``/compatible-mode/v1``. Deep
thinking on hybrid Qwen models is switched with a top-level
``enable_thinking`` boolean; thinking output arrives as ``reasoning_content``.
"""

from __future__ import annotations

from typing import Any, Optional

from ..base.models import ChatRequest
from ..openai_compat import OpenAICompatClient, ProviderAdapter, chain_adapters, client_from_config

PROVIDER_NAME = "qwen"
ENABLE_THINKING_FIELD = "enable_thinking"


def with_enable_thinking(request: ChatRequest, enabled: bool) -> ChatRequest:
    return request.with_extra(**{ENABLE_THINKING_FIELD: bool(enabled)})


class QwenAdapter(ProviderAdapter):
    name = PROVIDER_NAME

    def __init__(self, enable_thinking: Optional[bool] = None) -> None:
        self.enable_thinking = enable_thinking

    def before_map(self, request: ChatRequest) -> None:
        if self.enable_thinking is not None:
            request.extra.setdefault(ENABLE_THINKING_FIELD, self.enable_thinking)


def create_client(
    *,
    enable_thinking: Optional[bool] = None,
    adapter: Optional[ProviderAdapter] = None,
    **overrides: Any,
) -> OpenAICompatClient:
    """Build a Qwen client; ``enable_thinking`` sets the client-wide default."""
    return client_from_config(
        PROVIDER_NAME,
        adapter=chain_adapters(QwenAdapter(enable_thinking), adapter),
        **overrides,
    )


__all__ = ["PROVIDER_NAME", "QwenAdapter", "create_client", "with_enable_thinking"]
