"""Ollama provider preset."""

from .client import (
    PROVIDER_NAME,
    OllamaAdapter,
    create_client,
    with_format,
    with_keep_alive,
    with_options,
    with_think,
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
