"""Sliding-window usage breaker built on multi-resolution counters.

Each recorded amount is fanned out to one counter per bucket tier, keyed by
the current time floored to that tier. A window is later reconstructed from
the coarsest counters for old time and the finest counters for recent time,
so evaluating a 24h window costs a single ``get_multi`` of a few dozen keys.

Configuration fields (``active``, thresholds) are plain attributes with no
synchronization; they are meant for single-writer/many-reader use.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from window_breaker.buckets import (
    DEFAULT_BUCKETS,
    ONE_MINUTE,
    Bucket,
    duration_name,
    format_time_point,
    truncate_time,
)
from window_breaker.exceptions import CacheMissError
from window_breaker.models import BreakerStatus
from window_breaker.store.protocols import ICounterStore

if TYPE_CHECKING:
    from window_breaker.core.config import BreakerConfig

log = logging.getLogger(__name__)

# Returned by an inactive breaker and used as the "disabled" threshold.
MAX_WINDOW_VALUE = sys.maxsize

WARNING_KEY_TTL = timedelta(hours=12)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WindowCircuitBreaker:
    """Approximate "has usage over the last W exceeded a threshold?" check.

    The breaker holds configuration only. All counters and trip/warning flags
    live in the counter store, so instances can be recreated freely.

    Args:
        store: Backend implementing ``ICounterStore``.
        buckets: Bucket tiers; empty or ``None`` selects ``DEFAULT_BUCKETS``.
            Sorted coarsest first.
        cache_ttl: TTL for counter writes and the trip flag.
        feature_name: Namespace embedded in every key.
        window_duration: Length of the trailing window.
        clock: Returns the current instant; defaults to ``datetime.now(UTC)``.
    """

    def __init__(
        self,
        store: ICounterStore,
        buckets: Iterable[Bucket] | None = None,
        cache_ttl: timedelta = timedelta(hours=24),
        feature_name: str = "default",
        window_duration: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        tiers = tuple(buckets or ())
        if not tiers:
            tiers = DEFAULT_BUCKETS
        # sorted() is stable, so equal durations keep their given order
        self._buckets: tuple[Bucket, ...] = tuple(sorted(tiers, key=lambda b: b.duration, reverse=True))
        self._cache_ttl = cache_ttl
        self._feature_name = feature_name
        self._window_duration = window_duration
        self._window_duration_str = duration_name(window_duration)
        self._trip_key = f"cb-trip-{feature_name}-{self._window_duration_str}"
        self._warning_key = f"cb-warning_alert-{feature_name}-{self._window_duration_str}"
        self._clock = clock or _utc_now

        self.active = True
        self.threshold = MAX_WINDOW_VALUE
        self.warning_threshold = MAX_WINDOW_VALUE

    # ── Configuration ─────────────────────────────────────────────────

    @property
    def buckets(self) -> tuple[Bucket, ...]:
        return self._buckets

    @property
    def cache_ttl(self) -> timedelta:
        return self._cache_ttl

    @property
    def feature_name(self) -> str:
        return self._feature_name

    @property
    def window_duration(self) -> timedelta:
        return self._window_duration

    @property
    def window_duration_str(self) -> str:
        """Short window name used in keys, e.g. ``24h``."""
        return self._window_duration_str

    @property
    def trip_key(self) -> str:
        return self._trip_key

    @property
    def warning_key(self) -> str:
        return self._warning_key

    def set_active(self, active: bool) -> None:
        """Enable or disable the breaker. Inactive breakers never write."""
        self.active = active

    def set_threshold(self, threshold: int) -> None:
        self.threshold = threshold

    def set_warning_threshold(self, threshold: int) -> None:
        self.warning_threshold = threshold

    # ── Keys ──────────────────────────────────────────────────────────

    def _time_point_key(self, bucket_name: str, timestamp: datetime) -> str:
        # cb-<feature>-<window>-<bucket>-<YYYYMMDDhhmm>, e.g. cb-loan_disbursement-24h-1m-202305101230
        return f"cb-{self._feature_name}-{self._window_duration_str}-{bucket_name}-{format_time_point(timestamp)}"

    def generate_keys(self, now: datetime) -> list[str]:
        """Keys whose counters together cover ``[now - window, now]``.

        The first key is the head: the current coarsest-tier counter. From
        there each tier, coarsest to finest, steps back in time for as long as
        the step stays at or after the window start (floored to one minute).
        """
        coarsest = self._buckets[0]
        end_time = truncate_time(now, coarsest.duration)
        start_time = truncate_time(now - self._window_duration, ONE_MINUTE)

        keys = [self._time_point_key(coarsest.name, end_time)]
        for bucket in self._buckets:
            while end_time - bucket.duration >= start_time:
                end_time -= bucket.duration
                keys.append(self._time_point_key(bucket.name, end_time))
        return keys

    # ── Window aggregation ────────────────────────────────────────────

    def calculate_window_value(self) -> int:
        """Sum of all counters in the current window.

        An inactive breaker returns ``MAX_WINDOW_VALUE`` rather than zero.
        """
        if not self.active:
            return MAX_WINDOW_VALUE

        keys = self.generate_keys(self._clock())
        values = self._store.get_multi(keys)
        return sum(values.values())

    def is_exceeding_threshold(self, amount: int = 0) -> bool:
        """True when window value + ``amount`` reaches the threshold (inclusive)."""
        if not self.active:
            return False
        return self.calculate_window_value() + amount >= self.threshold

    def is_exceeding_warning_threshold(self, amount: int = 0) -> bool:
        """True when window value + ``amount`` reaches the warning threshold (inclusive)."""
        if not self.active:
            return False
        return self.calculate_window_value() + amount >= self.warning_threshold

    def update_latest_buckets_value(self, amount: int) -> None:
        """Add ``amount`` to the current counter of every bucket tier.

        A failing increment aborts the remaining tiers and propagates; tiers
        already incremented are not rolled back.
        """
        if not self.active:
            return

        now = self._clock()
        for bucket in self._buckets:
            key = self._time_point_key(bucket.name, truncate_time(now, bucket.duration))
            try:
                self._store.increment(key, amount, self._cache_ttl)
            except Exception:
                log.warning("Failed to increment %s by %d", key, amount, exc_info=True)
                raise

    # ── Trip / warning flags ──────────────────────────────────────────

    def _get_flag(self, key: str) -> bool:
        if not self.active:
            return False
        return bool(self._store.get(key))

    def _set_flag(self, key: str, value: bool, ttl: timedelta) -> None:
        if not self.active:
            return
        self._store.set(key, value, ttl)

    def get_trip(self) -> bool:
        """Stored trip flag. Raises ``CacheMissError`` if it was never written."""
        return self._get_flag(self._trip_key)

    def get_trip_warning(self) -> bool:
        """Stored warning flag. Raises ``CacheMissError`` if it was never written."""
        return self._get_flag(self._warning_key)

    def update_trip(self, is_tripped: bool) -> None:
        if not self.active:
            return
        self._set_flag(self._trip_key, is_tripped, self._cache_ttl)
        if is_tripped:
            log.warning("Breaker %s tripped (window %s)", self._feature_name, self._window_duration_str)

    def update_trip_warning(self, is_warning: bool) -> None:
        self._set_flag(self._warning_key, is_warning, WARNING_KEY_TTL)

    # ── Reporting ─────────────────────────────────────────────────────

    def snapshot(self) -> BreakerStatus:
        """Read the window value and both flags in one go."""
        window_value = self.calculate_window_value()
        return BreakerStatus(
            feature_name=self._feature_name,
            window=self._window_duration_str,
            active=self.active,
            window_value=window_value,
            threshold=self.threshold,
            warning_threshold=self.warning_threshold,
            exceeding_threshold=self.active and window_value >= self.threshold,
            exceeding_warning_threshold=self.active and window_value >= self.warning_threshold,
            tripped=self._read_optional_flag(self._trip_key),
            warning=self._read_optional_flag(self._warning_key),
        )

    def _read_optional_flag(self, key: str) -> bool | None:
        try:
            return self._get_flag(key)
        except CacheMissError:
            return None


def create_breaker(settings: object, store: ICounterStore | None = None) -> WindowCircuitBreaker:
    """Build a breaker from an ``AppSettings`` or ``BreakerConfig``.

    When ``store`` is omitted one is created from the settings' store config.
    """
    config: BreakerConfig = getattr(settings, "breaker", settings)  # type: ignore[assignment]

    if store is None:
        from window_breaker.store import create_counter_store

        store = create_counter_store(settings)

    breaker = WindowCircuitBreaker(
        store=store,
        buckets=[Bucket(d) for d in config.buckets],
        cache_ttl=config.cache_ttl,
        feature_name=config.feature_name,
        window_duration=config.window,
    )
    breaker.set_active(config.active)
    if config.threshold is not None:
        breaker.set_threshold(config.threshold)
    if config.warning_threshold is not None:
        breaker.set_warning_threshold(config.warning_threshold)
    return breaker
