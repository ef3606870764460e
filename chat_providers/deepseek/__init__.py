"""DeepSeek provider preset."""

from .client import PROVIDER_NAME, DeepSeekAdapter, create_client, thinking_value, with_thinking

__all__ = ["PROVIDER_NAME", "DeepSeekAdapter", "create_client", "thinking_value", "with_thinking"]
