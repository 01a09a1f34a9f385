"""
Shared pytest fixtures and configuration for taskline tests.

This module provides:
- Global configuration and active-chain reset for test isolation
- Small task classes reused across test modules
- Log capture through structlog's testing helpers

Usage:
    Fixtures are auto-discovered by pytest. Simply use them as function
    arguments (pytest injects them automatically).

    def test_something(succeeding_task):
        assert succeeding_task.call().is_success
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs

from taskline import Task
from taskline.core.configuration import reset_configuration
from taskline.core.logging import clear_context
from taskline.execution.chain import Chain


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path) or "_integration" in item.name:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow", "golden"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_configuration(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Reset the global configuration and the active chain around each test.

    Environment overrides from the developer's shell never leak into tests.
    """
    for name in list(os.environ):
        if name.startswith("TASKLINE_"):
            monkeypatch.delenv(name)

    reset_configuration()
    Chain.clear()
    clear_context()
    yield
    Chain.clear()
    clear_context()
    for name in list(os.environ):
        if name.startswith("TASKLINE_"):
            monkeypatch.delenv(name)
    reset_configuration()


@pytest.fixture
def captured_logs() -> Generator[list[dict[str, Any]], None, None]:
    """Collect structlog events emitted during the test."""
    with capture_logs() as logs:
        yield logs


# =============================================================================
# Sample Task Fixtures
# =============================================================================


@pytest.fixture
def succeeding_task() -> type[Task]:
    class Succeed(Task):
        def work(self):
            self.context.ran = True

    return Succeed


@pytest.fixture
def skipping_task() -> type[Task]:
    class Skip(Task):
        def work(self):
            self.skip("nothing to do", code="noop")

    return Skip


@pytest.fixture
def failing_task() -> type[Task]:
    class Fail(Task):
        def work(self):
            self.fail("card declined", code=402)

    return Fail


@pytest.fixture
def raising_task() -> type[Task]:
    class Explode(Task):
        def work(self):
            raise RuntimeError("boom")

    return Explode
