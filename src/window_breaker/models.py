"""Data models shared by the stores, the breaker and the CLI."""

from __future__ import annotations

import dataclasses
import time
from typing import Any


@dataclasses.dataclass
class CounterEntry:
    """A stored value plus its absolute expiry (``0`` = never expires)."""

    key: str
    value: Any
    expires_at: float = 0.0

    @property
    def is_expired(self) -> bool:
        if self.expires_at <= 0:
            return False
        return time.time() >= self.expires_at


@dataclasses.dataclass(frozen=True)
class BreakerStatus:
    """Point-in-time view of a breaker.

    ``tripped`` / ``warning`` are ``None`` when the flag has never been written.
    """

    feature_name: str
    window: str
    active: bool
    window_value: int
    threshold: int
    warning_threshold: int
    exceeding_threshold: bool
    exceeding_warning_threshold: bool
    tripped: bool | None
    warning: bool | None
