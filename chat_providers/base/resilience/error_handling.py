"""Decorator normalizing unexpected exceptions into `ProviderError`.

Applied to the client entry points so callers only ever see the closed error
taxonomy; programmer errors (`BodyNotReplayableError`, ``ValueError`` from
request validation) propagate unchanged.
"""
from __future__ import annotations

import functools
from typing import Callable, TypeVar

from pydantic import ValidationError

from ..errors import BodyNotReplayableError, ProviderError, error_from_exception

T = TypeVar("T")


def with_error_handling(func: Callable[..., T]) -> Callable[..., T]:
    """Wrap ``func`` so stray exceptions surface as classified provider errors.

    The provider name is taken from the bound instance's ``provider_name``
    attribute when present.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except (ProviderError, BodyNotReplayableError, ValidationError, ValueError, TypeError):
            raise
        except Exception as e:
            provider = getattr(args[0], "provider_name", "") if args else ""
            raise error_from_exception(e, provider=provider) from e

    return wrapper


__all__ = ["with_error_handling"]
