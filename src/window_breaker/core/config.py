"""Nested pydantic-settings configuration for window-breaker.

Each group reads its own ``WB_<GROUP>_*`` env vars::

    export WB_BREAKER_FEATURE_NAME=loan_disbursement
    export WB_BREAKER_WINDOW=P1D
    export WB_STORE_BACKEND=redis
"""

from __future__ import annotations

from datetime import timedelta
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class BreakerConfig(BaseSettings):
    """Window breaker configuration.

    Scalar durations use ISO 8601 (``P1D``, ``PT5M``). ``buckets`` is a JSON
    list of seconds; leave it empty to get the default 4h/1h/5m/1m tiers::

        export WB_BREAKER_BUCKETS='[3600, 300, 60]'
    """

    model_config = {"env_prefix": "WB_BREAKER_"}

    feature_name: str = "default"
    window: timedelta = timedelta(hours=24)
    buckets: list[timedelta] = Field(default_factory=list)
    cache_ttl: timedelta = timedelta(hours=24)
    threshold: Optional[int] = None
    warning_threshold: Optional[int] = None
    active: bool = True


class StoreConfig(BaseSettings):
    """Counter store configuration.

    Env vars use ``WB_STORE_`` prefix.
    """

    model_config = {"env_prefix": "WB_STORE_"}

    backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379"
    key_prefix: str = ""
    default_ttl: timedelta = timedelta(minutes=5)
    purge_interval: timedelta = timedelta(minutes=10)


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``WB_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "WB_OBSERVABILITY_"}

    log_level: str = "INFO"


class AppSettings(BaseSettings):
    """Top-level settings aggregating all sub-configs.

    Sub-configs are built per instance so each reads the environment at construction.
    """

    breaker: BreakerConfig = Field(default_factory=BreakerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
