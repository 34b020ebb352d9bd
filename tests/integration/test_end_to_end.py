"""
End-to-end tests for callorder.

Exercises the public API the way a test suite would: code under test is
instrumented with call(), a recorder is activated around it, and the
recorded order is verified against lists, builders and parsed expressions.
"""

from __future__ import annotations

import inspect
from typing import List

import pytest

import callorder
from callorder import (
    Call,
    CallRecorder,
    MismatchError,
    UncheckedRecorderError,
    call,
    parse_pattern,
)


# ---------------------------------------------------------------------------
# Code under test
# ---------------------------------------------------------------------------


class _Connection:
    """A tiny instrumented client used as code under test."""

    def __init__(self, retries: int = 0) -> None:
        self._retries = retries

    def open(self) -> None:
        call("open")
        for attempt in range(self._retries):
            call("retry-{}", attempt + 1)
        call("handshake")

    def send(self, payloads: List[str]) -> None:
        for payload in payloads:
            call("send:{p}", p=payload)

    def close(self) -> None:
        call("close")


def _session(conn: _Connection, payloads: List[str]) -> None:
    conn.open()
    conn.send(payloads)
    conn.close()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestPublicApi:
    """The names exported by the package."""

    def test_version(self) -> None:
        assert callorder.__version__ == "0.1.0"

    def test_all_exports_resolve(self) -> None:
        for name in callorder.__all__:
            assert hasattr(callorder, name)


class TestDocumentedExample:
    """The example from the package documentation."""

    def test_one_two_against_one_three(self) -> None:
        with CallRecorder.new() as c:
            call("1")
            call("2")
            line = inspect.currentframe().f_lineno - 1
            with pytest.raises(MismatchError) as exc_info:
                c.verify(["1", "3"])

        lines = str(exc_info.value).splitlines()
        assert lines[:4] == ["actual calls :", "  1", "* 2", "  (end)"]
        assert lines[4:6] == ["", "mismatch call"]
        assert lines[6].endswith(f"test_end_to_end.py:{line}")
        assert lines[7:] == ["actual : 2", "expect : 3"]


class TestInstrumentedSession:
    """Verify a realistic instrumented flow."""

    def test_plain_sequence(self) -> None:
        with CallRecorder.new_local() as c:
            _session(_Connection(), ["a", "b"])
            c.verify(["open", "handshake", "send:a", "send:b", "close"])

    def test_parsed_expression(self) -> None:
        expected = parse_pattern(
            """
            open,
            (handshake | (retry-1, handshake)),  # one retry allowed
            send:a,
            close
            """
        )
        for retries in (0, 1):
            with CallRecorder.new_local() as c:
                _session(_Connection(retries=retries), ["a"])
                c.verify(expected)

    def test_too_many_retries(self) -> None:
        expected = parse_pattern("open, (handshake | (retry-1, handshake)), close")
        with CallRecorder.new_local() as c:
            _session(_Connection(retries=2), [])
            error = c.result(expected)
        assert error is not None
        assert error.actual == "retry-2"
        assert error.expect == "handshake"

    def test_phases(self) -> None:
        conn = _Connection()
        with CallRecorder.new_local() as c:
            conn.open()
            c.verify(["open", "handshake"], message="connect phase")
            conn.send(["x"])
            conn.close()
            with pytest.raises(MismatchError) as exc_info:
                c.verify(["send:x", "send:y", "close"], message="transfer phase")
        report = exc_info.value.report
        assert report.message == "transfer phase"
        assert report.labels == ("send:x", "close")
        assert report.index == 1

    def test_missing_close(self) -> None:
        conn = _Connection()
        with CallRecorder.new_local() as c:
            conn.open()
            with pytest.raises(MismatchError) as exc_info:
                c.verify(Call.seq(["open", "handshake", "close"]))
        lines = str(exc_info.value).splitlines()
        assert lines[:4] == ["actual calls :", "  open", "  handshake", "* (end)"]
        assert lines[-2:] == ["actual : (end)", "expect : close"]

    def test_forgotten_verify(self) -> None:
        with pytest.raises(UncheckedRecorderError):
            with CallRecorder.new_local():
                _session(_Connection(), ["a", "b"])

    def test_without_recorder(self) -> None:
        with pytest.raises(callorder.RecorderNotActiveError):
            _session(_Connection(), [])
