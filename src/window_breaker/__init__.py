"""window-breaker: approximate sliding-window usage breaker over multi-resolution counters.

Usage::

    from window_breaker import MemoryCounterStore, WindowCircuitBreaker

    breaker = WindowCircuitBreaker(
        store=MemoryCounterStore(),
        feature_name="loan_disbursement",
        window_duration=timedelta(hours=24),
    )
    breaker.set_threshold(100_000)
    if breaker.is_exceeding_threshold(amount):
        breaker.update_trip(True)
    else:
        breaker.update_latest_buckets_value(amount)
"""

from __future__ import annotations

from window_breaker.breaker import MAX_WINDOW_VALUE, WARNING_KEY_TTL, WindowCircuitBreaker, create_breaker
from window_breaker.buckets import DEFAULT_BUCKETS, Bucket, duration_name, format_duration, truncate_time
from window_breaker.core.config import AppSettings, BreakerConfig, StoreConfig
from window_breaker.exceptions import CacheMissError, StoreError, WindowBreakerError
from window_breaker.models import BreakerStatus
from window_breaker.store import ICounterStore, MemoryCounterStore, create_counter_store

__all__ = [
    "AppSettings",
    "BreakerConfig",
    "BreakerStatus",
    "Bucket",
    "CacheMissError",
    "DEFAULT_BUCKETS",
    "ICounterStore",
    "MAX_WINDOW_VALUE",
    "MemoryCounterStore",
    "StoreConfig",
    "StoreError",
    "WARNING_KEY_TTL",
    "WindowBreakerError",
    "WindowCircuitBreaker",
    "create_breaker",
    "create_counter_store",
    "duration_name",
    "format_duration",
    "truncate_time",
]
