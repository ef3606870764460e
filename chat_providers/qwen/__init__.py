"""Qwen (DashScope) provider preset."""

from .client import PROVIDER_NAME, QwenAdapter, create_client, with_enable_thinking

__all__ = ["PROVIDER_NAME", "QwenAdapter", "create_client", "with_enable_thinking"]
