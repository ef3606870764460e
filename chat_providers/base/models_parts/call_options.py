"""
Per-call options for chat invocations.

Options never outlive the call they are passed to; the client keeps no
reference to them after returning.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..cancellation import CancellationToken
from ..timeouts import Deadline


@dataclass
class CallOptions:
    """Knobs scoped to a single call.

    Attributes:
        timeout: Budget in seconds for the whole call (all attempts and sleeps).
        deadline: Absolute caller deadline; the earliest of this, ``timeout``
            and the client-wide timeout bounds the call.
        cancellation_token: Token observed by sleeps, rate-limiter waits and
            stream reads.
        request_id: Explicit request id; generated per call when absent.
        headers: Extra headers merged over the client defaults.
    """

    timeout: Optional[float] = None
    deadline: Optional[Deadline] = None
    cancellation_token: Optional[CancellationToken] = None
    request_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


__all__ = ["CallOptions"]
