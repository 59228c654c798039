"""Counter store protocol: the contract the breaker needs from a backend."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ICounterStore(Protocol):
    """Protocol for counter storage backends (memory, Redis, etc.).

    A ``ttl`` of ``None`` or zero means "use the backend's default expiration".
    Cross-process correctness of the breaker depends entirely on
    :meth:`increment` being atomic.
    """

    def get(self, key: str) -> Any:
        """Load a value by key. Raises ``CacheMissError`` if not found."""
        ...

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Unconditionally create or overwrite a value."""
        ...

    def get_multi(self, keys: list[str]) -> dict[str, int]:
        """Fetch many counters at once. Absent keys are omitted from the result."""
        ...

    def increment(self, key: str, delta: int, ttl: timedelta | None = None) -> int:
        """Atomically add ``delta`` and return the new value.

        Absent keys are created with ``delta`` as their initial value and the
        given ``ttl``.
        """
        ...

    def delete(self, key: str) -> None:
        """Delete a key (no-op if not found)."""
        ...
