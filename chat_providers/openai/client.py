"""OpenAI preset.

The reference dialect: no request-side extensions. Response metadata the
shared mapper does not model (``system_fingerprint``, ``service_tier``) is
copied into ``ChatResponse.extra``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..base.models import ChatResponse
from ..openai_compat import OpenAICompatClient, ProviderAdapter, chain_adapters, client_from_config

PROVIDER_NAME = "openai"

RESPONSE_EXTRA_FIELDS = ("system_fingerprint", "service_tier")


class OpenAIAdapter(ProviderAdapter):
    name = PROVIDER_NAME

    def enrich_response(self, response: ChatResponse, payload: Dict[str, Any]) -> None:
        for key in RESPONSE_EXTRA_FIELDS:
            value = payload.get(key)
            if value:
                response.extra[key] = value


def create_client(*, adapter: Optional[ProviderAdapter] = None, **overrides: Any) -> OpenAICompatClient:
    return client_from_config(
        PROVIDER_NAME,
        adapter=chain_adapters(OpenAIAdapter(), adapter),
        **overrides,
    )


__all__ = ["PROVIDER_NAME", "OpenAIAdapter", "create_client"]
