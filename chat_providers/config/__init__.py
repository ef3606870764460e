"""Unified configuration layer for providers.

Goals
-----
* Centralize defaults (base URLs, chat paths, models, retry policy).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) named by CHAT_PROVIDERS_CONFIG_FILE
    3. Environment variables (e.g. DEEPSEEK_API_KEY, QWEN_MODEL)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider: str)``.

Environment Variable Conventions
--------------------------------
<PROVIDER>_API_KEY, <PROVIDER>_MODEL, <PROVIDER>_BASE_URL, <PROVIDER>_CHAT_PATH
e.g. DEEPSEEK_API_KEY, OLLAMA_BASE_URL. A ``.env`` file (path from
DOTENV_FILE, default ``.env``) is read once before the environment is
consulted.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Top-level keys are provider names; the
optional ``retry`` and ``timeout`` sections feed the executor::

    deepseek:
      model: deepseek-reasoner
      timeout: 60
      retry:
        max_attempts: 4
        backoff_base: 0.5
    ollama:
      base_url: http://gpu-box:11434
      timeout:
        call: 120
        stream_idle: 30

Mapping sections (``retry``, ``timeout``, ``headers``, ``rate_limit``) are
merged key by key across sources instead of being replaced wholesale.

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_model(provider: str) -> str | None
* retry_config_from(cfg, rng=None) -> RetryConfig
* timeouts_from(cfg) -> (call_timeout, stream_idle_timeout)
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import logging
import os
import random
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .defaults import (
    DEEPSEEK_DEFAULT_BASE_URL,
    DEEPSEEK_DEFAULT_CHAT_PATH,
    DEEPSEEK_DEFAULT_MODEL,
    KIMI_DEFAULT_BASE_URL,
    KIMI_DEFAULT_CHAT_PATH,
    KIMI_DEFAULT_MODEL,
    OLLAMA_DEFAULT_BASE_URL,
    OLLAMA_DEFAULT_CHAT_PATH,
    OLLAMA_DEFAULT_MODEL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_CHAT_PATH,
    OPENAI_DEFAULT_MODEL,
    QWEN_DEFAULT_BASE_URL,
    QWEN_DEFAULT_CHAT_PATH,
    QWEN_DEFAULT_MODEL,
    RETRY_DEFAULT_BACKOFF_BASE,
    RETRY_DEFAULT_BACKOFF_MAX,
    RETRY_DEFAULT_JITTER,
    RETRY_DEFAULT_MAX_ATTEMPTS,
    RETRY_DEFAULT_MAX_RETRY_AFTER,
    RETRY_DEFAULT_STATUSES,
)
from .env import env_overrides, is_placeholder

CONFIG_FILE_ENV = "CHAT_PROVIDERS_CONFIG_FILE"

_log = logging.getLogger("chat_providers.config")


# -------------------- Defaults --------------------

_RETRY_DEFAULTS: Dict[str, Any] = {
    "max_attempts": RETRY_DEFAULT_MAX_ATTEMPTS,
    "retry_statuses": list(RETRY_DEFAULT_STATUSES),
    "backoff_base": RETRY_DEFAULT_BACKOFF_BASE,
    "backoff_max": RETRY_DEFAULT_BACKOFF_MAX,
    "jitter": RETRY_DEFAULT_JITTER,
    "respect_retry_after": True,
    "max_retry_after": RETRY_DEFAULT_MAX_RETRY_AFTER,
}


def _preset(base_url: str, chat_path: str, model: str) -> Dict[str, Any]:
    return {"base_url": base_url, "chat_path": chat_path, "model": model}


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": _preset(OPENAI_DEFAULT_BASE_URL, OPENAI_DEFAULT_CHAT_PATH, OPENAI_DEFAULT_MODEL),
    "deepseek": _preset(DEEPSEEK_DEFAULT_BASE_URL, DEEPSEEK_DEFAULT_CHAT_PATH, DEEPSEEK_DEFAULT_MODEL),
    "qwen": _preset(QWEN_DEFAULT_BASE_URL, QWEN_DEFAULT_CHAT_PATH, QWEN_DEFAULT_MODEL),
    "kimi": _preset(KIMI_DEFAULT_BASE_URL, KIMI_DEFAULT_CHAT_PATH, KIMI_DEFAULT_MODEL),
    "ollama": _preset(OLLAMA_DEFAULT_BASE_URL, OLLAMA_DEFAULT_CHAT_PATH, OLLAMA_DEFAULT_MODEL),
}

_SECTION_KEYS = frozenset({"retry", "timeout", "headers", "rate_limit"})

_FILE_CACHE: Optional[Dict[str, Any]] = None
_FILE_CACHE_PATH: Optional[str] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader.

    Parses KEY=VALUE lines, ignoring comments and blank lines. Safe to call
    multiple times. Overrides existing environment variables only if their
    current values appear to be placeholders.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                if k.startswith("export "):
                    k = k[len("export "):].strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _parse_config_text(text: str, path: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            _log.warning("ignoring unreadable config file %s: %s", path, exc)
            data = {}
    if not isinstance(data, dict):
        _log.warning("ignoring config file %s: top level is not a mapping", path)
        data = {}
    return data


def _load_external_config() -> Dict[str, Any]:
    """Return the parsed config file, cached per path."""
    global _FILE_CACHE, _FILE_CACHE_PATH
    path = os.getenv(CONFIG_FILE_ENV) or ""
    if _FILE_CACHE is not None and _FILE_CACHE_PATH == path:
        return _FILE_CACHE
    data: Dict[str, Any] = {}
    if path and Path(path).is_file():
        data = _parse_config_text(Path(path).read_text(encoding="utf-8"), path)
    _FILE_CACHE, _FILE_CACHE_PATH = data, path
    return data


def reset_config_cache() -> None:
    """Forget the cached config file and allow ``.env`` to be read again."""
    global _FILE_CACHE, _FILE_CACHE_PATH, _DOTENV_LOADED
    _FILE_CACHE = None
    _FILE_CACHE_PATH = None
    _DOTENV_LOADED = False


def _merge(cfg: Dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Overlay ``layer`` onto ``cfg``; mapping sections merge key by key."""
    for key, value in layer.items():
        if value is None:
            continue
        current = cfg.get(key)
        if key in _SECTION_KEYS and isinstance(current, Mapping) and isinstance(value, Mapping):
            merged = dict(current)
            merged.update(value)
            cfg[key] = merged
        else:
            cfg[key] = value


def get_provider_config(provider: str, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    Unknown providers get no preset but still read file, env and overrides,
    so a custom OpenAI-compatible backend can be configured entirely by name.
    """
    _load_dotenv_once()
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {"retry": dict(_RETRY_DEFAULTS)}

    # 1. Defaults
    _merge(cfg, DEFAULTS.get(name, {}))

    # 2. External config file section
    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, Mapping):
        _merge(cfg, file_cfg)

    # 3. Env overrides
    _merge(cfg, env_overrides(name))

    # 4. Explicit overrides arg
    if overrides:
        _merge(cfg, overrides)

    if is_placeholder(cfg.get("api_key")):
        cfg.pop("api_key")
    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


def retry_config_from(cfg: Mapping[str, Any], rng: Optional[random.Random] = None):
    """Build the executor's `RetryConfig` from a merged config's ``retry`` section."""
    from ..base.resilience import RetryConfig

    return RetryConfig.from_mapping(cfg.get("retry"), rng=rng)


def _positive(value: Any) -> Optional[float]:
    if value is None:
        return None
    seconds = float(value)
    return seconds if seconds > 0 else None


def timeouts_from(cfg: Mapping[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    """Return ``(call_timeout, stream_idle_timeout)`` from the ``timeout`` section.

    The section is either a number (the client-wide call budget in seconds)
    or a mapping with ``call`` and ``stream_idle`` keys.
    """
    section = cfg.get("timeout")
    if section is None:
        return None, None
    if isinstance(section, Mapping):
        return _positive(section.get("call")), _positive(section.get("stream_idle"))
    return _positive(section), None


__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULTS",
    "get_provider_config",
    "get_model",
    "retry_config_from",
    "timeouts_from",
    "reset_config_cache",
]
