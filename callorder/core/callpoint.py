"""
Call points for code under test.

``call`` is what instrumented code invokes at each checkpoint.  It builds
the label, captures the caller's source location from the stack, and
records into the active recorder (see ``callorder.core.scope``).
"""

from __future__ import annotations

from typing import Any

from callorder.core import scope
from callorder.core.event import CallEvent, SourceLocation


def call(label: Any, *args: Any, **kwargs: Any) -> CallEvent:
    """
    Record a call point in the active recorder.

    With extra arguments the label is built with ``str.format``, so
    ``call("{}-{}", 1, 2)`` records ``"1-2"``.  Otherwise the label is
    ``str(label)``.

    Args:
        label: The label, or a format string when arguments follow.
        *args: Positional format arguments.
        **kwargs: Keyword format arguments.

    Returns:
        The recorded event.

    Raises:
        RecorderNotActiveError: If no recorder is active for this thread.
    """
    if args or kwargs:
        text = str(label).format(*args, **kwargs)
    else:
        text = str(label)
    recorder = scope.require_current()
    return recorder.record(text, SourceLocation.of_caller(1))
