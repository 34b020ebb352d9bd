"""
Thread-safe call recorder.

A ``CallRecorder`` accumulates ``CallEvent`` objects fired by call points
and verifies them against an expected pattern.  A single lock serialises
"assign sequence index + append", so events recorded concurrently from many
threads are never lost and never share an index.

A recorder that is never verified gives false confidence: closing it (or
leaving its ``with`` block) without a single ``verify`` raises
``UncheckedRecorderError`` unless the check was suppressed.
"""

from __future__ import annotations

import threading
from types import TracebackType
from typing import List, Optional, Tuple, Type

from callorder.core import scope
from callorder.core.event import CallEvent
from callorder.core.mismatch import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_MESSAGE,
    MismatchError,
    MismatchReport,
)
from callorder.core.pattern import find_mismatch, to_call
from callorder.utils.logger import LogLevel, RecorderLogger


class UncheckedRecorderError(AssertionError):
    """Raised when a recorder is closed without ever being verified."""
    pass


class CallRecorder:
    """
    Records call points and verifies their order.

    Attributes:
        context_lines: Calls listed on each side of a divergence in reports.
        color: Paint the divergent line of reports red.
        logger: Logger for recorded calls and verification results.
    """

    def __init__(
        self,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        color: bool = False,
        logger: Optional[RecorderLogger] = None,
    ) -> None:
        """
        Create an empty recorder.

        The recorder is not active: call points only reach it once
        :meth:`activate` is called (or it was built with :meth:`new` or
        :meth:`new_local`).  :meth:`record` works either way.

        Args:
            context_lines: Calls listed on each side of a divergence.
            color: Paint the divergent report line red.
            logger: Optional logger (default: silent).
        """
        if context_lines < 0:
            raise ValueError(
                f"context_lines must be non-negative, got {context_lines}"
            )
        self.context_lines: int = context_lines
        self.color: bool = color
        self.logger: RecorderLogger = logger or RecorderLogger(LogLevel.SILENT)

        self._lock = threading.Lock()
        self._events: List[CallEvent] = []
        # Events before this position were handed to a previous verify
        self._verified_upto: int = 0
        self._verified: bool = False
        self._suppressed: bool = False
        self._active: Optional[str] = None

    @classmethod
    def new(cls, **options) -> CallRecorder:
        """
        Create a recorder receiving call points from every thread.

        If another recorder created this way is still active, wait until
        it is closed.
        """
        recorder = cls(**options)
        recorder.activate()
        return recorder

    @classmethod
    def new_local(cls, **options) -> CallRecorder:
        """
        Create a recorder receiving call points from the current thread only.

        Raises:
            RecorderActiveError: If this thread already has a local recorder.
        """
        recorder = cls(**options)
        recorder.activate(local=True)
        return recorder

    # ------------------------------------------------------------------ #
    # Activation
    # ------------------------------------------------------------------ #

    def activate(self, local: bool = False) -> None:
        """
        Route call points to this recorder.

        Args:
            local: Only take call points fired on the current thread.
                Otherwise take them from all threads, waiting for any
                other globally active recorder to be released first.
        """
        if self._active is not None:
            raise scope.RecorderActiveError(
                f"CallRecorder is already active ({self._active})"
            )
        if local:
            scope.acquire_local(self)
            self._active = "local"
        else:
            scope.acquire_global(self)
            self._active = "global"
        self.logger.info(
            f"Activated {self._active} recorder",
            thread=threading.current_thread().name,
        )

    def deactivate(self) -> None:
        """Stop routing call points to this recorder. No-op when inactive."""
        if self._active is None:
            return
        if self._active == "local":
            scope.release_local(self)
        else:
            scope.release_global(self)
        self.logger.debug(f"Deactivated {self._active} recorder", calls=len(self))
        self._active = None

    @property
    def active(self) -> bool:
        """True while call points are routed to this recorder."""
        return self._active is not None

    # ------------------------------------------------------------------ #
    # Recording
    # ------------------------------------------------------------------ #

    def record(self, label: str, location: object) -> CallEvent:
        """
        Append a call event with the next sequence index.

        Safe to call concurrently from any number of threads.

        Args:
            label: Identifier of the call point.
            location: Where the call point fired; only used in reports.

        Returns:
            The recorded event.
        """
        with self._lock:
            event = CallEvent(label, location, len(self._events))
            self._events.append(event)
        self.logger.call_recorded(event.label, event.sequence_index, location)
        return event

    def events(self) -> Tuple[CallEvent, ...]:
        """Snapshot of every event recorded so far."""
        with self._lock:
            return tuple(self._events)

    def pending(self) -> Tuple[CallEvent, ...]:
        """Snapshot of the events not yet handed to :meth:`verify`."""
        with self._lock:
            return tuple(self._events[self._verified_upto:])

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, expected: object, message: str = DEFAULT_MESSAGE) -> None:
        """
        Check the calls recorded since the last verify against *expected*.

        The recorder counts as verified afterwards whether or not the
        check passes, and the compared calls are not compared again.

        Args:
            expected: A ``Call`` pattern, or anything ``to_call`` accepts,
                e.g. a list of labels.
            message: Headline of the mismatch report.

        Raises:
            MismatchError: If the calls diverge from *expected*.
        """
        error = self.result(expected, message)
        if error is not None:
            raise error

    def result(
        self, expected: object, message: str = DEFAULT_MESSAGE,
    ) -> Optional[MismatchError]:
        """
        Same as :meth:`verify`, but return the error instead of raising it.

        Returns:
            ``None`` when the calls match, otherwise the ``MismatchError``
            describing the first divergence.
        """
        pattern = to_call(expected)
        with self._lock:
            actual = tuple(self._events[self._verified_upto:])
            self._verified_upto = len(self._events)
            self._verified = True

        mismatch = find_mismatch(pattern, [event.label for event in actual])
        if mismatch is None:
            self.logger.verify_passed(len(actual))
            return None

        index, accepted = mismatch
        report = MismatchReport(actual, index, accepted, message)
        error = MismatchError(report, self.context_lines, self.color)
        self.logger.verify_failed(report.render(self.context_lines))
        return error

    @property
    def verified(self) -> bool:
        """True once :meth:`verify` or :meth:`result` has been called."""
        return self._verified

    # ------------------------------------------------------------------ #
    # Teardown
    # ------------------------------------------------------------------ #

    def suppress_unchecked(self) -> None:
        """Allow this recorder to be closed without being verified."""
        self._suppressed = True

    def check(self) -> None:
        """
        Fail if the recorder was never verified.

        Raises:
            UncheckedRecorderError: If neither :meth:`verify` nor
                :meth:`result` was called and the check is not suppressed.
        """
        if self._verified or self._suppressed:
            return
        raise UncheckedRecorderError(
            "CallRecorder was dropped without calling verify "
            f"({len(self)} calls recorded)"
        )

    def close(self) -> None:
        """Deactivate the recorder and run :meth:`check`."""
        self.deactivate()
        self.check()

    def __enter__(self) -> CallRecorder:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.deactivate()
        # Keep an in-flight error instead of masking it with the check
        if exc_type is None:
            self.check()

    def __repr__(self) -> str:
        state = self._active or "inactive"
        return f"CallRecorder({len(self)} calls, {state})"
