"""OpenAI provider preset."""

from .client import PROVIDER_NAME, OpenAIAdapter, create_client

__all__ = ["PROVIDER_NAME", "OpenAIAdapter", "create_client"]
