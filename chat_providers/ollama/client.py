"""Ollama preset (local daemon, OpenAI-compatible endpoint).

Ollama accepts a few top-level keys beyond the OpenAI dialect:

- ``format``: JSON schema (or ``"json"``) for structured output.
- ``keep_alive``: how long the model stays loaded (``"5m"``, ``"24h"``).
- ``options``: runtime options (``num_ctx``, ``top_k``, ``repeat_penalty``...).
- ``think``: enable reasoning on models that support it.

Each can be set per request with the ``with_*`` helpers or as client
defaults through ``create_client``; per-request values win. No API key is
needed, so none is required by the preset.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from ..base.models import ChatRequest
from ..openai_compat import OpenAICompatClient, ProviderAdapter, chain_adapters, client_from_config

PROVIDER_NAME = "ollama"

FORMAT_FIELD = "format"
KEEP_ALIVE_FIELD = "keep_alive"
OPTIONS_FIELD = "options"
THINK_FIELD = "think"

FormatSpec = Union[str, Mapping[str, Any]]


def with_format(request: ChatRequest, schema: FormatSpec) -> ChatRequest:
    value = schema if isinstance(schema, str) else dict(schema)
    return request.with_extra(**{FORMAT_FIELD: value})


def with_keep_alive(request: ChatRequest, duration: str) -> ChatRequest:
    """Set ``keep_alive``; an empty duration removes it so the server default applies."""
    out = request.clone()
    if duration:
        out.extra[KEEP_ALIVE_FIELD] = duration
    else:
        out.extra.pop(KEEP_ALIVE_FIELD, None)
    return out


def with_options(request: ChatRequest, options: Mapping[str, Any]) -> ChatRequest:
    return request.with_extra(**{OPTIONS_FIELD: dict(options)})


def with_think(request: ChatRequest, enabled: bool) -> ChatRequest:
    return request.with_extra(**{THINK_FIELD: bool(enabled)})


class OllamaAdapter(ProviderAdapter):
    """Fills Ollama-specific keys from client defaults when a request lacks them."""

    name = PROVIDER_NAME

    def __init__(
        self,
        *,
        format: Optional[FormatSpec] = None,
        keep_alive: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
        think: Optional[bool] = None,
    ) -> None:
        self.defaults: Dict[str, Any] = {}
        if format is not None:
            self.defaults[FORMAT_FIELD] = format if isinstance(format, str) else dict(format)
        if keep_alive:
            self.defaults[KEEP_ALIVE_FIELD] = keep_alive
        if options is not None:
            self.defaults[OPTIONS_FIELD] = dict(options)
        if think is not None:
            self.defaults[THINK_FIELD] = think

    def before_map(self, request: ChatRequest) -> None:
        for key, value in self.defaults.items():
            request.extra.setdefault(key, value)


def create_client(
    *,
    format: Optional[FormatSpec] = None,
    keep_alive: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    think: Optional[bool] = None,
    adapter: Optional[ProviderAdapter] = None,
    **overrides: Any,
) -> OpenAICompatClient:
    """Build an Ollama client; the keyword arguments set client-wide defaults."""
    ollama = OllamaAdapter(format=format, keep_alive=keep_alive, options=options, think=think)
    return client_from_config(
        PROVIDER_NAME,
        adapter=chain_adapters(ollama, adapter),
        **overrides,
    )


__all__ = [
    "PROVIDER_NAME",
    "OllamaAdapter",
    "create_client",
    "with_format",
    "with_keep_alive",
    "with_options",
    "with_think",
]
