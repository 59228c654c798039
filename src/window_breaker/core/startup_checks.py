"""Startup validation: fail-fast on breaker configurations that produce useless keys."""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from typing import TYPE_CHECKING

from window_breaker.buckets import DEFAULT_BUCKETS, Bucket, duration_name

if TYPE_CHECKING:
    from window_breaker.core.config import AppSettings

log = logging.getLogger(__name__)


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig."""
    _check_window(settings)
    _check_buckets(settings)
    _check_store(settings)


def _check_window(settings: AppSettings) -> None:
    """Reject windows and feature names that would collapse every key together."""
    cfg = settings.breaker
    if not cfg.feature_name:
        raise ValueError("WB_BREAKER_FEATURE_NAME must not be empty.")
    if cfg.window <= timedelta(0):
        raise ValueError(f"WB_BREAKER_WINDOW must be positive, got {cfg.window}.")
    if not duration_name(cfg.window):
        raise ValueError(
            f"WB_BREAKER_WINDOW={cfg.window} has no whole hour or minute component "
            "and cannot be named in cache keys."
        )


def _check_buckets(settings: AppSettings) -> None:
    """Bucket names must identify their durations uniquely (1h30m and 1h both name as 1h)."""
    cfg = settings.breaker
    for duration in cfg.buckets:
        if duration <= timedelta(0):
            raise ValueError(f"WB_BREAKER_BUCKETS contains a non-positive duration: {duration}.")

    buckets = [Bucket(d) for d in cfg.buckets] or list(DEFAULT_BUCKETS)
    seen: dict[str, timedelta] = {}
    for bucket in buckets:
        if not bucket.name:
            raise ValueError(f"Bucket {bucket.duration} has no whole hour or minute component.")
        other = seen.setdefault(bucket.name, bucket.duration)
        if other != bucket.duration:
            raise ValueError(
                f"Buckets {other} and {bucket.duration} share the key name '{bucket.name}'."
            )

    finest = min(b.duration for b in buckets)
    if cfg.window % finest:
        log.warning(
            "WB_BREAKER_WINDOW=%s is not a multiple of the finest bucket (%s); "
            "the window edge will be approximated.",
            cfg.window,
            finest,
        )


def _check_store(settings: AppSettings) -> None:
    """Warn about the process-local memory store in containerized environments."""
    is_container = bool(
        os.environ.get("ECS_CONTAINER_METADATA_URI")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
    )
    if is_container and settings.store.backend == "memory":
        log.warning(
            "WB_STORE_BACKEND=memory in a container environment. "
            "Counters are not shared between replicas. Consider setting WB_STORE_BACKEND=redis."
        )
