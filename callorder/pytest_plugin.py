"""
pytest integration for callorder.

Provides the ``call_recorder`` fixture: a recorder that is active for every
thread during the test and is checked for a ``verify`` call at teardown
when the test body passed.

Ini options:
    callorder_context_lines  calls shown around a divergence (default 5)
    callorder_log_level      silent, normal, verbose or debug (default silent)
    callorder_color          paint the divergent report line red (default false)

Markers:
    callorder_unchecked      allow the test to skip ``verify``
"""

from __future__ import annotations

import sys
from typing import Iterator, Optional

import pytest

from callorder.core.mismatch import DEFAULT_CONTEXT_LINES
from callorder.core.recorder import CallRecorder
from callorder.utils.logger import LogLevel, RecorderLogger


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        "callorder_context_lines",
        help="Calls listed on each side of a divergence in mismatch reports",
        default=str(DEFAULT_CONTEXT_LINES),
    )
    parser.addini(
        "callorder_log_level",
        help="callorder log level: silent, normal, verbose or debug",
        default="silent",
    )
    parser.addini(
        "callorder_color",
        help="Paint the divergent line of mismatch reports red",
        type="bool",
        default=False,
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "callorder_unchecked: allow call_recorder to be left unverified",
    )


_call_report = pytest.StashKey[pytest.TestReport]()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        item.stash[_call_report] = report


def _build_recorder(config: pytest.Config) -> CallRecorder:
    """Create a recorder configured from the ini options."""
    context_lines = int(config.getini("callorder_context_lines"))
    level = LogLevel.from_name(config.getini("callorder_log_level"))
    color = bool(config.getini("callorder_color"))
    return CallRecorder(
        context_lines=context_lines,
        color=color,
        logger=RecorderLogger(level=level, stream=sys.stdout),
    )


@pytest.fixture
def call_recorder(request: pytest.FixtureRequest) -> Iterator[CallRecorder]:
    """An active, all-threads recorder that must be verified by the test."""
    recorder = _build_recorder(request.config)
    if request.node.get_closest_marker("callorder_unchecked") is not None:
        recorder.suppress_unchecked()
    recorder.activate()
    try:
        yield recorder
    finally:
        recorder.deactivate()
    # Only a passing test body is held to the verify requirement
    report: Optional[pytest.TestReport] = request.node.stash.get(_call_report, None)
    if report is None or report.passed:
        recorder.check()
