"""Kimi (Moonshot) preset.

Moonshot is OpenAI-compatible without request-side extensions; the preset
only supplies the base URL, chat path and default model.
"""

from __future__ import annotations

from typing import Any, Optional

from ..openai_compat import OpenAICompatClient, ProviderAdapter, chain_adapters, client_from_config

PROVIDER_NAME = "kimi"


class KimiAdapter(ProviderAdapter):
    name = PROVIDER_NAME


def create_client(*, adapter: Optional[ProviderAdapter] = None, **overrides: Any) -> OpenAICompatClient:
    return client_from_config(
        PROVIDER_NAME,
        adapter=chain_adapters(KimiAdapter(), adapter),
        **overrides,
    )


__all__ = ["PROVIDER_NAME", "KimiAdapter", "create_client"]
