"""
Build an `OpenAICompatClient` from merged provider configuration.

Provider presets and the factory share this path: configuration keys
(``api_key``, ``model``, ``base_url``, ``chat_path``, ``timeout``, ``retry``,
``headers``, ``rate_limit``, ``allow_extra_override``) go through
``get_provider_config``; runtime objects (transport, adapter, random source,
sleeper, logger, rate limiter) are passed straight to the client.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, Mapping, Optional

from ..base.http.transport import HttpxTransport, Transport
from ..base.resilience import RateLimiter, Sleeper, TokenBucketRateLimiter
from ..config import get_provider_config, retry_config_from, timeouts_from
from .adapter import ProviderAdapter
from .client import DEFAULT_CHAT_PATH, OpenAICompatClient


def _rate_limiter_from(section: Any) -> Optional[TokenBucketRateLimiter]:
    """``rate_limit: {rate: <per second>, burst: <n>}``; absent or zero rate means none."""
    if not isinstance(section, Mapping):
        return None
    rate = float(section.get("rate") or 0)
    if rate <= 0:
        return None
    return TokenBucketRateLimiter(rate, burst=int(section.get("burst") or 1))


def client_from_config(
    provider: str,
    *,
    adapter: Optional[ProviderAdapter] = None,
    transport: Optional[Transport] = None,
    rate_limiter: Optional[RateLimiter] = None,
    rng: Optional[random.Random] = None,
    sleeper: Optional[Sleeper] = None,
    logger: Optional[logging.Logger] = None,
    **overrides: Any,
) -> OpenAICompatClient:
    """Merge configuration for ``provider`` and build its client.

    Raises:
        ValueError: no ``base_url`` could be resolved for the provider.
    """
    cfg: Dict[str, Any] = get_provider_config(provider, overrides)
    base_url = cfg.get("base_url")
    if not base_url:
        raise ValueError(f"no base_url configured for provider '{provider}'")
    call_timeout, stream_idle = timeouts_from(cfg)
    if transport is None:
        transport = HttpxTransport(base_url, stream_idle_timeout=stream_idle)
    return OpenAICompatClient(
        provider_name=provider,
        base_url=base_url,
        api_key=cfg.get("api_key"),
        chat_path=cfg.get("chat_path") or DEFAULT_CHAT_PATH,
        default_model=cfg.get("model") or "",
        adapter=adapter,
        transport=transport,
        retry_config=retry_config_from(cfg, rng=rng),
        timeout=call_timeout,
        default_headers=cfg.get("headers") or None,
        rate_limiter=rate_limiter or _rate_limiter_from(cfg.get("rate_limit")),
        allow_extra_override=bool(cfg.get("allow_extra_override", False)),
        rng=rng,
        sleeper=sleeper,
        logger=logger,
    )


__all__ = ["client_from_config"]
