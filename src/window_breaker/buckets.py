"""Time-resolution buckets and the duration/timestamp helpers shared by reads and writes.

Every bucket name and every timestamp ends up verbatim inside a cache key, so
the same formatting and flooring rules must be used everywhere.
"""

from __future__ import annotations

import dataclasses
import re
from datetime import datetime, timedelta, timezone

# Bucket boundaries are multiples of the bucket duration since this instant.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
ONE_MINUTE = timedelta(minutes=1)
TIME_POINT_FORMAT = "%Y%m%d%H%M"

_DURATION_NAME_RE = re.compile(r"^\d+[hm]")
_MICROS_PER_SECOND = 1_000_000
_MICROS_PER_MINUTE = 60 * _MICROS_PER_SECOND
_MICROS_PER_HOUR = 60 * _MICROS_PER_MINUTE


def format_duration(duration: timedelta) -> str:
    """Render a duration as ``<h>h<m>m<s>s``, e.g. ``4h0m0s``, ``5m0s``, ``30s``.

    Hours are never rolled up into days, so one week is ``168h0m0s``.
    """
    micros = duration // timedelta(microseconds=1)
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    hours, rem = divmod(abs(micros), _MICROS_PER_HOUR)
    minutes, rem = divmod(rem, _MICROS_PER_MINUTE)
    seconds, frac = divmod(rem, _MICROS_PER_SECOND)

    secs = str(seconds)
    if frac:
        secs = f"{seconds}.{frac:06d}".rstrip("0")

    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


def duration_name(duration: timedelta) -> str:
    """Short canonical name of a duration: ``4h0m0s`` -> ``4h``, ``1m0s`` -> ``1m``.

    Returns an empty string for durations without an hour or minute magnitude.
    """
    match = _DURATION_NAME_RE.match(format_duration(duration))
    return match.group(0) if match else ""


def as_utc(moment: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def truncate_time(moment: datetime, duration: timedelta) -> datetime:
    """Floor ``moment`` to the latest multiple of ``duration`` since 0001-01-01 UTC."""
    moment = as_utc(moment)
    return moment - (moment - ZERO_TIME) % duration


def format_time_point(moment: datetime) -> str:
    """Fixed-width ``YYYYMMDDhhmm`` rendering of a UTC instant."""
    return as_utc(moment).strftime(TIME_POINT_FORMAT)


@dataclasses.dataclass(frozen=True)
class Bucket:
    """A single time resolution at which counts are floored and stored."""

    duration: timedelta
    name: str = dataclasses.field(init=False)

    def __post_init__(self) -> None:
        if self.duration <= timedelta(0):
            raise ValueError(f"Bucket duration must be positive, got {self.duration!r}")
        object.__setattr__(self, "name", duration_name(self.duration))


DEFAULT_BUCKETS: tuple[Bucket, ...] = (
    Bucket(timedelta(hours=4)),
    Bucket(timedelta(hours=1)),
    Bucket(timedelta(minutes=5)),
    Bucket(timedelta(minutes=1)),
)
