"""
Structured logging for call recorders.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for recorded calls, verification passes
and mismatch reports.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """
    Logging levels for a recorder.

    SILENT:  No output at all.
    NORMAL:  Mismatches only.
    VERBOSE: Verification passes as well.
    DEBUG:   Every recorded call.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3

    @classmethod
    def from_name(cls, name: str) -> LogLevel:
        """
        Look up a level by its case-insensitive name.

        Raises:
            ValueError: If *name* is not a level name.
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            choices = ", ".join(level.name.lower() for level in cls)
            raise ValueError(
                f"Unknown log level '{name}' (expected one of: {choices})"
            ) from None


class RecorderLogger:
    """
    Structured logger for call recorders.

    Output is filtered by the configured log level.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def enabled_for(self, level: LogLevel) -> bool:
        """True when messages at *level* are written."""
        return self.level.value >= level.value

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled_for(LogLevel.DEBUG):
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled_for(LogLevel.VERBOSE):
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def call_recorded(self, label: str, index: int, location: object) -> None:
        """Log one recorded call (shown at DEBUG level)."""
        if self.enabled_for(LogLevel.DEBUG):
            self._write(f"[CALL] #{index} {label} @ {location}")

    def verify_passed(self, count: int) -> None:
        """Log a successful verification (shown at VERBOSE level and above)."""
        if self.enabled_for(LogLevel.VERBOSE):
            self._write(f"VERIFIED: {count} calls matched the expected pattern")

    def verify_failed(self, rendered: str) -> None:
        """Log a failed verification with its report (shown at NORMAL level and above)."""
        if self.enabled_for(LogLevel.NORMAL):
            self._write("MISMATCH: Recorded calls differ from the expected pattern")
            for line in rendered.splitlines():
                self._write(f"  {line}")

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
