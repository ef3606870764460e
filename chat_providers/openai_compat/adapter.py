"""
Provider adapter hooks for OpenAI-compatible backends.

Backends speaking the OpenAI chat dialect differ in small ways: extra
headers, vendor-specific request keys (``thinking``, ``enable_thinking``,
``keep_alive``), and extra response fields. A `ProviderAdapter` captures
those differences through four hooks, all no-ops by default:

- ``patch_headers(headers)``: mutate outgoing headers in place.
- ``before_map(request)``: mutate a private clone of the `ChatRequest`
  before it is mapped to JSON.
- ``patch_request(payload)``: mutate the mapped JSON body in place.
- ``enrich_response(response, payload)``: fill ``response.extra`` from the
  decoded response JSON.

Hooks receive private copies; the caller's request is never touched.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from ..base.models import ChatRequest, ChatResponse

HeadersHook = Callable[[Dict[str, str]], None]
RequestHook = Callable[[ChatRequest], None]
PayloadHook = Callable[[Dict[str, Any]], None]
ResponseHook = Callable[[ChatResponse, Dict[str, Any]], None]


class ProviderAdapter:
    """Base adapter; every hook is a no-op."""

    name: str = "openai_compat"

    def patch_headers(self, headers: Dict[str, str]) -> None:
        return None

    def before_map(self, request: ChatRequest) -> None:
        return None

    def patch_request(self, payload: Dict[str, Any]) -> None:
        return None

    def enrich_response(self, response: ChatResponse, payload: Dict[str, Any]) -> None:
        return None


class HookAdapter(ProviderAdapter):
    """Adapter assembled from plain callables (any hook may be omitted)."""

    def __init__(
        self,
        *,
        name: str = "custom",
        patch_headers: Optional[HeadersHook] = None,
        before_map: Optional[RequestHook] = None,
        patch_request: Optional[PayloadHook] = None,
        enrich_response: Optional[ResponseHook] = None,
    ) -> None:
        self.name = name
        self._patch_headers = patch_headers
        self._before_map = before_map
        self._patch_request = patch_request
        self._enrich_response = enrich_response

    def patch_headers(self, headers: Dict[str, str]) -> None:
        if self._patch_headers is not None:
            self._patch_headers(headers)

    def before_map(self, request: ChatRequest) -> None:
        if self._before_map is not None:
            self._before_map(request)

    def patch_request(self, payload: Dict[str, Any]) -> None:
        if self._patch_request is not None:
            self._patch_request(payload)

    def enrich_response(self, response: ChatResponse, payload: Dict[str, Any]) -> None:
        if self._enrich_response is not None:
            self._enrich_response(response, payload)


class ChainedAdapter(ProviderAdapter):
    """Runs each hook of every adapter in registration order."""

    def __init__(self, adapters: Iterable[ProviderAdapter]) -> None:
        self.adapters: List[ProviderAdapter] = list(adapters)
        self.name = "+".join(a.name for a in self.adapters) or "openai_compat"

    def patch_headers(self, headers: Dict[str, str]) -> None:
        for adapter in self.adapters:
            adapter.patch_headers(headers)

    def before_map(self, request: ChatRequest) -> None:
        for adapter in self.adapters:
            adapter.before_map(request)

    def patch_request(self, payload: Dict[str, Any]) -> None:
        for adapter in self.adapters:
            adapter.patch_request(payload)

    def enrich_response(self, response: ChatResponse, payload: Dict[str, Any]) -> None:
        for adapter in self.adapters:
            adapter.enrich_response(response, payload)


def chain_adapters(*adapters: Optional[ProviderAdapter]) -> ProviderAdapter:
    """Compose adapters; ``None`` entries are skipped and a single adapter is returned as is."""
    present = [a for a in adapters if a is not None]
    if not present:
        return ProviderAdapter()
    if len(present) == 1:
        return present[0]
    return ChainedAdapter(present)


__all__ = [
    "ProviderAdapter",
    "HookAdapter",
    "ChainedAdapter",
    "chain_adapters",
]
