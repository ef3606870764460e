"""chat_providers.config.env
=========================

Environment variable conventions for provider settings.

Every provider reads ``<PROVIDER>_API_KEY``, ``<PROVIDER>_MODEL``,
``<PROVIDER>_BASE_URL`` and ``<PROVIDER>_CHAT_PATH``. Some backends are
commonly configured under a second name (DashScope keys for Qwen, Moonshot
keys for Kimi); those are listed in ``ENV_ALIASES`` after the canonical name.

Helpers never raise on unknown providers or unset variables; callers decide
how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Config field -> env var suffix
ENV_FIELD_MAP: Dict[str, str] = {
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "model": "MODEL",
    "base_url": "BASE_URL",
    "chat_path": "CHAT_PATH",
}

# Provider -> additional accepted API key variables (canonical one is implied)
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "qwen": ("DASHSCOPE_API_KEY",),
    "kimi": ("MOONSHOT_API_KEY",),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and ignores surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def env_var_name(provider: str, field: str) -> Optional[str]:
    """Return ``<PROVIDER>_<SUFFIX>`` for a config field, or None for unknown fields."""
    suffix = ENV_FIELD_MAP.get(field)
    if not provider or suffix is None:
        return None
    return f"{provider.upper()}_{suffix}"


def get_env_var_candidates(provider: str) -> Iterable[str]:
    """Yield acceptable API key variable names for a provider, canonical first."""
    p = (provider or "").lower()
    canonical = env_var_name(p, "api_key")
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(p, ()):
        if alias != canonical:
            yield alias


def resolve_provider_key(provider: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first non-empty API key variable.

    ``(None, None)`` when nothing is set.
    """
    for name in get_env_var_candidates(provider):
        if val := os.environ.get(name):
            return val, name
    return None, None


def env_overrides(provider: str) -> Dict[str, str]:
    """Collect the config fields a provider's environment variables set."""
    out: Dict[str, str] = {}
    for field in ENV_FIELD_MAP:
        if field == "api_key":
            value, _ = resolve_provider_key(provider)
        else:
            name = env_var_name(provider, field)
            value = os.environ.get(name) if name else None
        if value:
            out[field] = value
    return out


__all__ = [
    "ENV_FIELD_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "env_var_name",
    "get_env_var_candidates",
    "resolve_provider_key",
    "env_overrides",
]
