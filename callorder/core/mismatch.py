"""
Mismatch reports for failed verifications.

A ``MismatchReport`` captures everything needed to explain why the recorded
calls did not match the expected pattern: the calls themselves, the index
where they diverged, what was expected there, and where in the source the
divergent call was made.  Rendering is pure; the same report always renders
to the same text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from colorama import Fore, Style

from callorder.core.event import CallEvent
from callorder.core.pattern import END

DEFAULT_MESSAGE = "mismatch call"
DEFAULT_CONTEXT_LINES = 5


@dataclass(frozen=True)
class MismatchReport:
    """
    Why a verification failed.

    Attributes:
        events: The recorded calls that were compared, in record order.
        index: Divergence index; ``len(events)`` when the calls ran out.
        expected: Labels accepted at the divergence, sorted.  Empty when
            no further calls were expected.
        message: Headline shown above the location.
    """

    events: Tuple[CallEvent, ...]
    index: int
    expected: Tuple[str, ...]
    message: str = DEFAULT_MESSAGE

    def __post_init__(self) -> None:
        if not 0 <= self.index <= len(self.events):
            raise ValueError(
                f"divergence index {self.index} outside 0..{len(self.events)}"
            )

    # ------------------------------------------------------------------ #
    # Derived values
    # ------------------------------------------------------------------ #

    @property
    def actual(self) -> str:
        """The divergent recorded label, or ``(end)`` if the calls ran out."""
        return self.label_at(self.index)

    @property
    def expect(self) -> str:
        """The expected label(s) at the divergence, or ``(end)``."""
        return ", ".join(self.expected) if self.expected else END

    @property
    def labels(self) -> Tuple[str, ...]:
        """All compared labels in record order."""
        return tuple(event.label for event in self.events)

    @property
    def event(self) -> Optional[CallEvent]:
        """
        The call nearest the divergence.

        That is the divergent call itself, or the last recorded call when
        the calls ran out, or ``None`` when nothing was recorded.
        """
        if self.index < len(self.events):
            return self.events[self.index]
        if self.events:
            return self.events[-1]
        return None

    @property
    def location(self) -> Optional[object]:
        """Source location of :attr:`event`."""
        event = self.event
        return event.location if event is not None else None

    def label_at(self, index: int) -> str:
        """Label of the call at *index*, or ``(end)`` past the last call."""
        if index < len(self.events):
            return self.events[index].label
        return END

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def render(
        self,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        color: bool = False,
    ) -> str:
        """
        Render the report as text.

        Args:
            context_lines: Number of calls listed on each side of the
                divergent one; the rest are summarised as omitted.
            color: Paint the divergent line red with ANSI escapes.

        Returns:
            The multi-line report, without a trailing newline.
        """
        lines = ["actual calls :"]
        lines.extend(self._summary_lines(context_lines, color))
        lines.append("")
        lines.append(self.message)
        location = self.location
        if location is not None:
            lines.append(str(location))
        lines.append(f"actual : {self.actual}")
        lines.append(f"expect : {self.expect}")
        return "\n".join(lines)

    def render_details(self, context_lines: int = DEFAULT_CONTEXT_LINES) -> str:
        """
        Render where and on which thread each call up to the divergence fired.

        Args:
            context_lines: Number of calls listed before the divergent one.
        """
        count = len(self.events)
        start = max(self.index - context_lines, 0)
        end = min(self.index + 1, count)
        lines: List[str] = []
        if start > 0:
            lines.append(f"# ...(previous {start} calls omitted)")
        for event in self.events[start:end]:
            lines.append(f"# {event.label}")
            lines.append(str(event.location))
            lines.append(f"thread: {event.thread_name}")
        if end == count:
            lines.append(f"# {END}")
        else:
            lines.append(f"  ...(following {count - end} calls omitted)")
        return "\n".join(lines)

    def _summary_lines(self, context_lines: int, color: bool) -> List[str]:
        count = len(self.events)
        start = max(self.index - context_lines, 0)
        end = min(self.index + context_lines + 1, count)
        lines: List[str] = []
        if start > 0:
            lines.append(f"  ...(previous {start} calls omitted)")
        for index in range(start, end):
            lines.append(self._summary_line(index, self.label_at(index), color))
        if end == count:
            lines.append(self._summary_line(count, END, color))
        else:
            lines.append(f"  ...(following {count - end} calls omitted)")
        return lines

    def _summary_line(self, index: int, label: str, color: bool) -> str:
        if index != self.index:
            return f"  {label}"
        if color:
            return f"{Fore.RED}* {label}{Style.RESET_ALL}"
        return f"* {label}"

    def __str__(self) -> str:
        return self.render()


class MismatchError(AssertionError):
    """
    Raised when recorded calls do not match the expected pattern.

    Attributes:
        report: The structured description of the mismatch.
    """

    def __init__(
        self,
        report: MismatchReport,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        color: bool = False,
    ) -> None:
        self.report = report
        self.context_lines = context_lines
        self.color = color
        super().__init__(report.render(context_lines, color))

    def __reduce__(self):
        return type(self), (self.report, self.context_lines, self.color)

    @property
    def index(self) -> int:
        """Divergence index of the underlying report."""
        return self.report.index

    @property
    def actual(self) -> str:
        return self.report.actual

    @property
    def expect(self) -> str:
        return self.report.expect
