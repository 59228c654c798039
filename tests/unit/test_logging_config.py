"""Tests for structlog-backed logging setup."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from window_breaker.core.config import ObservabilityConfig
from window_breaker.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("window_breaker").setLevel(logging.NOTSET)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_installs_structlog_formatter(self) -> None:
        setup_logging(ObservabilityConfig(log_level="DEBUG"))
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("window_breaker").level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging(ObservabilityConfig(log_level="chatty"))
        assert logging.getLogger().level == logging.INFO
