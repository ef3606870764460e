"""Kimi (Moonshot) provider preset."""

from .client import PROVIDER_NAME, KimiAdapter, create_client

__all__ = ["PROVIDER_NAME", "KimiAdapter", "create_client"]
