"""
Shared pytest fixtures for the callorder test suite.

Provides reusable fixtures for recorders and source locations used across
unit and integration tests, and loads ``pytester`` for plugin tests.
"""

from typing import Iterator

import pytest

from callorder.core import scope
from callorder.core.event import SourceLocation
from callorder.core.recorder import CallRecorder

pytest_plugins = ["pytester", "callorder.pytest_plugin"]


@pytest.fixture
def location() -> SourceLocation:
    """A fixed source location so rendered reports are predictable."""
    return SourceLocation("tests/test_module.py", 10)


@pytest.fixture
def recorder() -> CallRecorder:
    """A fresh, inactive recorder."""
    return CallRecorder()


@pytest.fixture(autouse=True)
def _no_leaked_recorders() -> Iterator[None]:
    """Fail loudly if a test leaves a recorder active."""
    yield
    leaked = scope.current()
    if leaked is not None:
        leaked.deactivate()
        pytest.fail(f"test left {leaked!r} active")
