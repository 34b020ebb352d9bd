"""
Active recorder bookkeeping.

Call points do not hold a reference to a recorder; they record into
whichever recorder is *active*.  Two slots exist:

* a **global** slot shared by every thread.  Only one recorder can hold it
  at a time; activating another one waits until the holder is released.
* a **local** slot per thread.  A thread's local recorder takes precedence
  over the global one for call points fired on that thread.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from callorder.core.recorder import CallRecorder


class RecorderActiveError(RuntimeError):
    """Raised when activating a recorder whose slot is already taken."""
    pass


class RecorderNotActiveError(RuntimeError):
    """Raised when a call point fires with no active recorder."""
    pass


_global_condition = threading.Condition()
_global_recorder: Optional[CallRecorder] = None
# Thread that activated the global recorder
_global_owner: Optional[int] = None
_local = threading.local()


def acquire_global(recorder: CallRecorder) -> None:
    """
    Make *recorder* the global recorder.

    Blocks until no other recorder holds the global slot.

    Raises:
        RecorderActiveError: If the current thread already holds the slot.
    """
    global _global_recorder, _global_owner
    me = threading.get_ident()
    with _global_condition:
        while _global_recorder is not None:
            if _global_owner == me:
                raise RecorderActiveError(
                    "A global CallRecorder is already active in this thread; "
                    "close it first or use CallRecorder.new_local()"
                )
            _global_condition.wait()
        _global_recorder = recorder
        _global_owner = me


def release_global(recorder: CallRecorder) -> None:
    """Release the global slot if *recorder* holds it and wake up waiters."""
    global _global_recorder, _global_owner
    with _global_condition:
        if _global_recorder is recorder:
            _global_recorder = None
            _global_owner = None
            _global_condition.notify_all()


def acquire_local(recorder: CallRecorder) -> None:
    """
    Make *recorder* the local recorder of the current thread.

    Raises:
        RecorderActiveError: If this thread already has a local recorder.
    """
    if getattr(_local, "recorder", None) is not None:
        raise RecorderActiveError(
            "A local CallRecorder is already active in this thread"
        )
    _local.recorder = recorder


def release_local(recorder: CallRecorder) -> None:
    """Release the current thread's local slot if *recorder* holds it."""
    if getattr(_local, "recorder", None) is recorder:
        _local.recorder = None


def current() -> Optional[CallRecorder]:
    """The recorder call points on this thread record into, if any."""
    recorder = getattr(_local, "recorder", None)
    if recorder is not None:
        return recorder
    with _global_condition:
        return _global_recorder


def require_current() -> CallRecorder:
    """
    Like :func:`current`, but fail when there is no active recorder.

    Raises:
        RecorderNotActiveError: If neither a local nor a global recorder
            is active.
    """
    recorder = current()
    if recorder is None:
        raise RecorderNotActiveError("`CallRecorder` is not initialized.")
    return recorder
