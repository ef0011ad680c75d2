"""
Shared pytest fixtures and configuration for sweep-core tests.

This module provides:
- Registry and logging cleanup for test isolation
- A fake clock so deadline behaviour can be tested without waiting
- A release event for actions that must hang until teardown

Usage:
    Fixtures are auto-discovered by pytest; request them by argument name.

    def test_deadline(fake_clock):
        engine = QueueEngine(config, fake_clock)
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from sweep.core.logging import clear_context
from sweep.core.settings import get_settings
from sweep.modules.registry import reset_default_registry


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_module_registry() -> Generator[None, None, None]:
    """Clear the default search module registry around each test."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture(autouse=True)
def clean_logging() -> Generator[None, None, None]:
    """Drop structlog configuration and bound context after each test.

    CLI tests configure structlog against CliRunner's captured stderr, which
    is closed once the invocation returns.
    """
    yield
    clear_context()
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Hide SWEEP_* variables from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("SWEEP_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Time and Concurrency Fixtures
# =============================================================================


class FakeClock:
    """Clock whose ``sleep`` advances simulated time instantly.

    A short real pause is kept on every sleep so worker threads get
    scheduled while the poll loop spins.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds
        time.sleep(0.001)

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def release() -> Generator[threading.Event, None, None]:
    """Event that hung actions wait on; set at teardown so no thread outlives the test."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def targets_dir(tmp_path: Path) -> Path:
    """Directory with test/dev scope files (no prod file)."""
    directory = tmp_path / "targets"
    directory.mkdir()
    (directory / "test.txt").write_text("# lab hosts\nlab01\nlab02\n\nlab03  # flaky\n")
    (directory / "dev.txt").write_text("dev01\n")
    return directory
