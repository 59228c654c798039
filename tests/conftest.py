"""Shared fixtures for window-breaker tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tests.fakes.fake_counter_store import FakeCounterStore
from window_breaker.breaker import WindowCircuitBreaker
from window_breaker.buckets import Bucket


@pytest.fixture
def fixed_now() -> datetime:
    """2023-05-12 10:12 UTC, the reference instant for key fixtures."""
    return datetime(2023, 5, 12, 10, 12, tzinfo=timezone.utc)


@pytest.fixture
def four_tier_buckets() -> list[Bucket]:
    return [
        Bucket(timedelta(hours=4)),
        Bucket(timedelta(hours=1)),
        Bucket(timedelta(minutes=5)),
        Bucket(timedelta(minutes=1)),
    ]


@pytest.fixture
def fake_store() -> FakeCounterStore:
    return FakeCounterStore()


@pytest.fixture
def breaker(fake_store: FakeCounterStore, four_tier_buckets: list[Bucket], fixed_now: datetime) -> WindowCircuitBreaker:
    """24h breaker for feature ``test`` with a frozen clock."""
    return WindowCircuitBreaker(
        store=fake_store,
        buckets=four_tier_buckets,
        cache_ttl=timedelta(hours=24),
        feature_name="test",
        window_duration=timedelta(hours=24),
        clock=lambda: fixed_now,
    )
