"""Pytest configuration for the chat_providers test suite.

Shared fixtures:
- ``isolated_config`` (autouse): every test runs in a temporary working
  directory with provider environment variables cleared and the config cache
  reset, so a developer's ``.env`` or exported keys never leak into tests.
- ``recording_sleeper``: a `Sleeper` that records requested delays instead of
  sleeping.
- ``make_client``: builds an `OpenAICompatClient` whose HTTP traffic goes to
  an ``httpx.MockTransport`` handler.
"""

from __future__ import annotations

import os
import random
from typing import Any, Callable, Iterator

import httpx
import pytest

from chat_providers.base.http import HttpxTransport, close_all_clients
from chat_providers.config import reset_config_cache
from chat_providers.openai_compat import OpenAICompatClient
from chat_providers.tests.helpers import RecordingSleeper

_PROVIDER_PREFIXES = ("OPENAI", "DEEPSEEK", "QWEN", "KIMI", "OLLAMA", "DASHSCOPE", "MOONSHOT")
_ENV_SUFFIXES = ("API_KEY", "MODEL", "BASE_URL", "CHAT_PATH")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CHAT_PROVIDERS_CONFIG_FILE", raising=False)
    monkeypatch.delenv("DOTENV_FILE", raising=False)
    for prefix in _PROVIDER_PREFIXES:
        for suffix in _ENV_SUFFIXES:
            monkeypatch.delenv(f"{prefix}_{suffix}", raising=False)
    reset_config_cache()
    before = set(os.environ)
    yield
    # .env loading writes os.environ directly
    for name in set(os.environ) - before:
        os.environ.pop(name, None)
    reset_config_cache()


@pytest.fixture(scope="session", autouse=True)
def close_pooled_clients() -> Iterator[None]:
    """Close pooled httpx clients once the session ends."""
    yield
    close_all_clients()


@pytest.fixture()
def recording_sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture()
def make_client(recording_sleeper: RecordingSleeper) -> Callable[..., OpenAICompatClient]:
    """Factory building a client over ``httpx.MockTransport(handler)``.

    Keyword arguments are forwarded to `OpenAICompatClient`; the sleeper
    defaults to ``recording_sleeper`` and jitter is seeded.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> OpenAICompatClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        kwargs.setdefault("provider_name", "test")
        kwargs.setdefault("base_url", "https://api.test")
        kwargs.setdefault("api_key", "sk-live-123")
        kwargs.setdefault("default_model", "test-model")
        kwargs.setdefault("sleeper", recording_sleeper)
        kwargs.setdefault("rng", random.Random(7))
        kwargs.setdefault("transport", HttpxTransport(client=http_client))
        return OpenAICompatClient(**kwargs)

    return _make
