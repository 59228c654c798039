"""Pluggable counter stores: factory + backend implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from window_breaker.store.memory import MemoryCounterStore
from window_breaker.store.protocols import ICounterStore

if TYPE_CHECKING:
    from window_breaker.core.config import StoreConfig

__all__ = [
    "create_counter_store",
    "ICounterStore",
    "MemoryCounterStore",
]


def create_counter_store(settings: object | None = None) -> ICounterStore:
    """Create a counter store from settings.

    Args:
        settings: An ``AppSettings`` or ``StoreConfig`` instance.
            If None, returns MemoryCounterStore with defaults.
    """
    config: StoreConfig | None = None

    if settings is not None:
        config = getattr(settings, "store", None)
        if config is None and hasattr(settings, "backend"):
            config = settings  # type: ignore[assignment]

    if config is None:
        return MemoryCounterStore()

    backend = config.backend
    if backend == "memory":
        return MemoryCounterStore(default_ttl=config.default_ttl, purge_interval=config.purge_interval)
    elif backend == "redis":
        from window_breaker.store.redis import RedisCounterStore

        return RedisCounterStore(
            url=config.redis_url,
            key_prefix=config.key_prefix,
            default_ttl=config.default_ttl,
        )
    else:
        raise ValueError(f"Unknown counter store backend: {backend!r}")
