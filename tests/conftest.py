"""Pytest fixtures for exptrack tests."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from helpers import DeferredExecutor, FakeExpenseService, ImmediateExecutor, make_expense

from exptrack.logging_setup import PKG_LOGGER_NAME


@pytest.fixture
def seeded_service() -> Callable[[int], FakeExpenseService]:
    """Factory for a fake backend holding expenses 1..count."""

    def build(count: int) -> FakeExpenseService:
        return FakeExpenseService([make_expense(i) for i in range(1, count + 1)])

    return build


@pytest.fixture
def immediate_executor() -> ImmediateExecutor:
    return ImmediateExecutor()


@pytest.fixture
def deferred_executor() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point XDG config/state dirs at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.delenv("EXPTRACK_API_URL", raising=False)
    yield tmp_path


@pytest.fixture
def restore_package_logger() -> Iterator[logging.Logger]:
    """Undo configure_logging calls made by a test."""
    logger = logging.getLogger(PKG_LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
