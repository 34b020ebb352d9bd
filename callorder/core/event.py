"""
Event representation for recorded call points.

Each event carries the label the call point was fired with, an opaque
source location used only for reporting, the position in which the
recorder observed it, and the name of the thread that fired it.
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceLocation:
    """
    A ``file:line`` position in source code.

    Attributes:
        file: Path of the source file as reported by the interpreter.
        line: 1-based line number.
    """

    file: str
    line: int

    @classmethod
    def of_caller(cls, depth: int = 0) -> SourceLocation:
        """
        Capture the location of a frame on the current stack.

        Args:
            depth: How many frames above the caller of this method to
                look. ``0`` is the function calling ``of_caller``.

        Returns:
            The file and line that frame is currently executing.
        """
        frame = sys._getframe(depth + 1)
        return cls(frame.f_code.co_filename, frame.f_lineno)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class CallEvent:
    """
    Immutable record of one call point firing.

    Attributes:
        label: Identifier chosen by the test author; not required to be unique.
        location: Where the call point fired. Only used for reporting,
            never compared.
        sequence_index: Position in record order for the owning recorder.
        thread_name: Name of the thread that fired the call point.
    """

    label: str
    location: object
    sequence_index: int
    thread_name: str = field(
        default_factory=lambda: threading.current_thread().name,
        compare=False,
    )

    def __post_init__(self) -> None:
        if not isinstance(self.label, str):
            raise TypeError(
                f"label must be a str, got {type(self.label).__name__}"
            )
        if self.sequence_index < 0:
            raise ValueError(
                f"sequence_index must be non-negative, got {self.sequence_index}"
            )

    def __str__(self) -> str:
        return f"#{self.sequence_index} {self.label} @ {self.location}"
