"""Redis-backed counter store for sharing breaker state across processes.

Requires optional dependency: ``pip install window-breaker[redis]``
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

from window_breaker.exceptions import CacheMissError

log = logging.getLogger(__name__)


class RedisCounterStore:
    """Sync Redis counter store using ``redis.Redis``.

    Values are JSON-encoded, which keeps integers in the plain decimal form
    ``INCRBY`` operates on. Increments run ``SET NX PX`` + ``INCRBY`` inside a
    ``MULTI`` pipeline so key creation, TTL and the add happen atomically.
    """

    def __init__(
        self,
        url: str = "",
        key_prefix: str = "",
        default_ttl: timedelta = timedelta(0),
        client: Any | None = None,
    ) -> None:
        self._url = url or "redis://localhost:6379"
        self._key_prefix = key_prefix
        self._default_ttl = default_ttl
        self._client: Any | None = client

    def _get_client(self) -> Any:
        """Lazy-initialize the Redis client."""
        if self._client is not None:
            return self._client
        try:
            import redis  # type: ignore[import-untyped]
        except ImportError:
            raise ImportError(
                "Redis is required for the Redis counter store backend. "
                "Install it with: pip install window-breaker[redis]"
            ) from None

        self._client = redis.Redis.from_url(self._url, decode_responses=True)
        return self._client

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _ttl_millis(self, ttl: timedelta | None) -> int | None:
        if ttl is None or ttl <= timedelta(0):
            ttl = self._default_ttl
        if ttl <= timedelta(0):
            return None
        return max(1, int(ttl.total_seconds() * 1000))

    def get(self, key: str) -> Any:
        raw = self._get_client().get(self._key(key))
        if raw is None:
            raise CacheMissError(key)
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        self._get_client().set(self._key(key), json.dumps(value), px=self._ttl_millis(ttl))

    def get_multi(self, keys: list[str]) -> dict[str, int]:
        if not keys:
            return {}
        raw_values = self._get_client().mget([self._key(k) for k in keys])
        return {key: int(json.loads(raw)) for key, raw in zip(keys, raw_values) if raw is not None}

    def increment(self, key: str, delta: int, ttl: timedelta | None = None) -> int:
        full_key = self._key(key)
        pipe = self._get_client().pipeline(transaction=True)
        pipe.set(full_key, 0, px=self._ttl_millis(ttl), nx=True)
        pipe.incrby(full_key, delta)
        _, value = pipe.execute()
        log.debug("Incremented %s by %d -> %s", full_key, delta, value)
        return int(value)

    def delete(self, key: str) -> None:
        self._get_client().delete(self._key(key))
