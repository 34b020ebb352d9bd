"""
Tests for active recorder bookkeeping.

Tests cover the global slot (including waiting for it), per-thread local
slots, precedence of local over global, and the not-initialized error.
"""

import threading
import time

import pytest

from callorder.core import scope
from callorder.core.recorder import CallRecorder


class TestGlobalSlot:
    """Test the slot shared by all threads."""

    def test_acquire_and_release(self, recorder: CallRecorder) -> None:
        scope.acquire_global(recorder)
        assert scope.current() is recorder
        scope.release_global(recorder)
        assert scope.current() is None

    def test_visible_from_other_threads(self, recorder: CallRecorder) -> None:
        seen = []
        scope.acquire_global(recorder)
        try:
            t = threading.Thread(target=lambda: seen.append(scope.current()))
            t.start()
            t.join()
        finally:
            scope.release_global(recorder)
        assert seen == [recorder]

    def test_release_by_non_holder_ignored(self, recorder: CallRecorder) -> None:
        scope.acquire_global(recorder)
        try:
            scope.release_global(CallRecorder())
            assert scope.current() is recorder
        finally:
            scope.release_global(recorder)

    def test_second_acquire_waits_for_release(self) -> None:
        first = CallRecorder()
        second = CallRecorder()
        acquired = threading.Event()

        def _take_second() -> None:
            scope.acquire_global(second)
            acquired.set()
            scope.release_global(second)

        scope.acquire_global(first)
        t = threading.Thread(target=_take_second)
        t.start()
        try:
            assert not acquired.wait(0.2)
        finally:
            scope.release_global(first)
        t.join(timeout=5)
        assert acquired.is_set()

    def test_holder_thread_cannot_acquire_again(self) -> None:
        """The holding thread gets an error instead of waiting forever."""
        first = CallRecorder()
        scope.acquire_global(first)
        try:
            with pytest.raises(scope.RecorderActiveError, match="already active in this thread"):
                scope.acquire_global(CallRecorder())
            assert scope.current() is first
        finally:
            scope.release_global(first)

    def test_owner_cleared_on_release(self) -> None:
        first = CallRecorder()
        second = CallRecorder()
        scope.acquire_global(first)
        scope.release_global(first)
        scope.acquire_global(second)
        assert scope.current() is second
        scope.release_global(second)

    def test_at_most_one_global_recorder(self) -> None:
        """Concurrent holders never overlap."""
        holders = []
        max_holders = []
        lock = threading.Lock()

        def _hold() -> None:
            recorder = CallRecorder.new()
            with lock:
                holders.append(recorder)
                max_holders.append(len(holders))
            time.sleep(0.01)
            with lock:
                holders.remove(recorder)
            recorder.suppress_unchecked()
            recorder.close()

        threads = [threading.Thread(target=_hold) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)
        assert max(max_holders) == 1


class TestLocalSlot:
    """Test per-thread slots."""

    def test_acquire_and_release(self, recorder: CallRecorder) -> None:
        scope.acquire_local(recorder)
        assert scope.current() is recorder
        scope.release_local(recorder)
        assert scope.current() is None

    def test_second_local_rejected(self, recorder: CallRecorder) -> None:
        scope.acquire_local(recorder)
        try:
            with pytest.raises(scope.RecorderActiveError):
                scope.acquire_local(CallRecorder())
        finally:
            scope.release_local(recorder)

    def test_not_visible_from_other_threads(self, recorder: CallRecorder) -> None:
        seen = []
        scope.acquire_local(recorder)
        try:
            t = threading.Thread(target=lambda: seen.append(scope.current()))
            t.start()
            t.join()
        finally:
            scope.release_local(recorder)
        assert seen == [None]

    def test_local_takes_precedence(self) -> None:
        global_recorder = CallRecorder()
        local_recorder = CallRecorder()
        scope.acquire_global(global_recorder)
        scope.acquire_local(local_recorder)
        try:
            assert scope.current() is local_recorder
        finally:
            scope.release_local(local_recorder)
            scope.release_global(global_recorder)


class TestRequireCurrent:
    """Test the error raised without an active recorder."""

    def test_raises_when_nothing_active(self) -> None:
        with pytest.raises(scope.RecorderNotActiveError, match="not initialized"):
            scope.require_current()

    def test_returns_active(self, recorder: CallRecorder) -> None:
        scope.acquire_local(recorder)
        try:
            assert scope.require_current() is recorder
        finally:
            scope.release_local(recorder)
