"""Provider Factory utilities.

Purpose
-------
Create a configured `OpenAICompatClient` for a provider by canonical name.
Provider presets are imported lazily using ``importlib`` so importing the
package does not import every preset.

Each preset module exposes ``create_client(**overrides)``; the factory
resolves the module and forwards the overrides, which may be configuration
keys (``api_key``, ``model``, ``base_url``, ``chat_path``, ``timeout``,
``retry``...) or client runtime objects (``transport``, ``adapter``,
``rng``, ``sleeper``...).

No timeouts, retries or fallbacks are introduced here; the factory either
returns a client or raises a clear error.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Callable, Dict, Tuple


class UnknownProviderError(Exception):
    """Raised when a provider cannot be resolved or initialized.

    Failure modes include:
    - The provider name is not registered in the factory mapping.
    - The provider module cannot be imported or lacks ``create_client``.
    - The preset rejected the supplied arguments.
    """


class ProviderFactory:
    """Create provider clients based on a canonical name (e.g., ``"deepseek"``)."""

    _PROVIDERS: Dict[str, str] = {
        "openai": "chat_providers.openai.client",
        "deepseek": "chat_providers.deepseek.client",
        "qwen": "chat_providers.qwen.client",
        "kimi": "chat_providers.kimi.client",
        "ollama": "chat_providers.ollama.client",
    }

    @classmethod
    def _builder(cls, provider: str) -> Callable[..., Any]:
        name = (provider or "").lower().strip()
        module_path = cls._PROVIDERS.get(name)
        if not module_path:
            raise UnknownProviderError(
                f"Unknown provider '{provider}' (supported: {', '.join(cls.supported())})"
            )
        try:
            mod = import_module(module_path)
        except ImportError as exc:  # pragma: no cover - import failure path
            raise UnknownProviderError(
                f"Failed to import module '{module_path}' for provider '{provider}': {exc}"
            ) from exc
        builder = getattr(mod, "create_client", None)
        if not callable(builder):
            raise UnknownProviderError(f"'create_client' not found in '{module_path}' for provider '{provider}'")
        return builder

    @classmethod
    def create(cls, provider: str, **overrides: Any) -> Any:
        """Create an `OpenAICompatClient` for ``provider``.

        Raises
        ------
        UnknownProviderError
            If the provider is unknown, its preset fails to import, or the
            preset rejects the supplied keyword arguments.
        ValueError
            If no base URL could be resolved from configuration.
        """
        builder = cls._builder(provider)
        try:
            return builder(**overrides)
        except TypeError as exc:
            raise UnknownProviderError(f"Invalid arguments for provider '{provider}': {exc}") from exc

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return the canonical provider names in deterministic order."""
        return tuple(cls._PROVIDERS.keys())


def create(provider: str, **overrides: Any) -> Any:
    """Module-level shortcut for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, **overrides)


__all__ = ["UnknownProviderError", "ProviderFactory", "create"]
