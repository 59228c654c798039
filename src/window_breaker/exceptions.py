"""Exception hierarchy for window-breaker."""


class WindowBreakerError(Exception):
    """Base exception for all window-breaker errors."""


class CacheMissError(WindowBreakerError):
    """Raised when an expected key is absent from the counter store.

    Distinguishes "never set" from a stored ``False`` flag.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"cache miss: {key}")
        self.key = key


class StoreError(WindowBreakerError):
    """Raised when a counter store backend operation fails."""


__all__ = [
    "WindowBreakerError",
    "CacheMissError",
    "StoreError",
]
