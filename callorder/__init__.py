"""
callorder: assert the order in which instrumented call points fire.

Code under test calls ``call("label")`` at interesting checkpoints; the
test activates a ``CallRecorder`` and later verifies the labels against an
expected sequence (or a partial order for concurrent code), receiving a
readable diff on mismatch.
"""

from callorder.core.callpoint import call
from callorder.core.event import CallEvent, SourceLocation
from callorder.core.mismatch import MismatchError, MismatchReport
from callorder.core.pattern import Call, InOrder, Interleaved, Label, OneOf, to_call
from callorder.core.recorder import CallRecorder, UncheckedRecorderError
from callorder.core.scope import RecorderActiveError, RecorderNotActiveError
from callorder.parser.expression import parse_pattern

__version__ = "0.1.0"

__all__ = [
    "Call",
    "CallEvent",
    "CallRecorder",
    "InOrder",
    "Interleaved",
    "Label",
    "MismatchError",
    "MismatchReport",
    "OneOf",
    "RecorderActiveError",
    "RecorderNotActiveError",
    "SourceLocation",
    "UncheckedRecorderError",
    "call",
    "parse_pattern",
    "to_call",
]
