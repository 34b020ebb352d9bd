"""
Expected-call patterns and the matching algorithm.

A pattern is an immutable tree of ``Call`` nodes describing which call
sequences are acceptable:

    Label        exactly one call with a given label
    InOrder      every item, one after another
    Interleaved  every item, calls of different items interleaved freely
    OneOf        exactly one of the items

Plain Python values are coerced by ``to_call``: strings and integers become
labels, ``None`` means no calls, and any other iterable is taken in order.

Matching feeds recorded labels to the pattern one at a time.  Each step
either yields the remaining pattern or the labels that would have been
accepted instead; an empty set of accepted labels means the pattern is
already complete.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, Tuple

END = "(end)"

_BARE_LABEL = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.:\-]*\Z")

# Characters that must be escaped inside a quoted label
_QUOTED_ESCAPES = str.maketrans({
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
})

# (remaining pattern, accepted labels); remaining is None when the label was rejected
_Step = Tuple[Optional["Call"], List[str]]


class Call(ABC):
    """
    Base class for all expected-call pattern nodes.

    Nodes are immutable and support equality comparison and hashing.
    """

    # ------------------------------------------------------------------ #
    # Builders
    # ------------------------------------------------------------------ #

    @staticmethod
    def id(label: object) -> Label:
        """A single call with the given label."""
        return Label(str(label))

    @staticmethod
    def empty() -> InOrder:
        """No calls at all."""
        return InOrder(())

    @staticmethod
    def seq(items: Iterable[object]) -> InOrder:
        """All *items*, called one after another."""
        return InOrder(to_call(item) for item in items)

    @staticmethod
    def par(items: Iterable[object]) -> Interleaved:
        """All *items*, with their calls interleaved in any order."""
        return Interleaved(to_call(item) for item in items)

    @staticmethod
    def any(items: Iterable[object]) -> OneOf:
        """Exactly one of *items*."""
        return OneOf(to_call(item) for item in items)

    # ------------------------------------------------------------------ #
    # Node protocol
    # ------------------------------------------------------------------ #

    @abstractmethod
    def advance(self, label: Optional[str]) -> _Step:
        """
        Consume one recorded label (``None`` for the end of the calls).

        Returns:
            ``(remaining, [])`` when the label is accepted, otherwise
            ``(None, accepted)`` where *accepted* lists the labels that
            would have matched.  An empty *accepted* list means the
            pattern needs no further calls.
        """

    @abstractmethod
    def labels(self) -> frozenset[str]:
        """Return every label mentioned in the pattern."""

    @abstractmethod
    def __str__(self) -> str:
        """Return the pattern expression for this node."""

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        """Check equality with another pattern."""

    @abstractmethod
    def __hash__(self) -> int:
        """Return hash for use in sets and dicts."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class Label(Call):
    """
    Exactly one call with label *name*.

    Attributes:
        name: The expected label.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def advance(self, label: Optional[str]) -> _Step:
        if label == self.name:
            return InOrder(()), []
        return None, [self.name]

    def labels(self) -> frozenset[str]:
        return frozenset({self.name})

    def __str__(self) -> str:
        if _BARE_LABEL.match(self.name):
            return self.name
        escaped = self.name.translate(_QUOTED_ESCAPES)
        return f'"{escaped}"'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Label):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(("Label", self.name))


class _Group(Call):
    """Base class for nodes holding child patterns (not part of public API)."""

    __slots__ = ("items",)

    _separator: str = ""

    def __init__(self, items: Iterable[Call]) -> None:
        self.items: Tuple[Call, ...] = tuple(items)

    def labels(self) -> frozenset[str]:
        result: frozenset[str] = frozenset()
        for item in self.items:
            result |= item.labels()
        return result

    def __str__(self) -> str:
        if len(self.items) == 1:
            return str(self.items[0])
        return "(" + self._separator.join(str(item) for item in self.items) + ")"

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.items == other.items

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.items))


class InOrder(_Group):
    """Every item, one after another. With no items: no calls."""

    _separator = ", "

    def advance(self, label: Optional[str]) -> _Step:
        for i, item in enumerate(self.items):
            rest, accepted = item.advance(label)
            if rest is not None:
                return InOrder((rest,) + self.items[i + 1:]), []
            if accepted:
                return None, accepted
            # item is complete; move on to the next one
        return None, []


class Interleaved(_Group):
    """
    Every item, where calls belonging to different items may interleave.

    Each call is given to the first item that accepts it.
    """

    _separator = " & "

    def advance(self, label: Optional[str]) -> _Step:
        accepted: List[str] = []
        for i, item in enumerate(self.items):
            rest, item_accepted = item.advance(label)
            if rest is not None:
                items = self.items[:i] + (rest,) + self.items[i + 1:]
                return Interleaved(items), []
            accepted.extend(item_accepted)
        return None, accepted


class OneOf(_Group):
    """
    Exactly one of the items.

    All branches accepting a call stay alive until the calls tell them apart.
    """

    _separator = " | "

    def advance(self, label: Optional[str]) -> _Step:
        alive: List[Call] = []
        accepted: List[str] = []
        complete = False
        for item in self.items:
            rest, item_accepted = item.advance(label)
            if rest is not None:
                alive.append(rest)
            elif item_accepted:
                accepted.extend(item_accepted)
            else:
                complete = True
        if alive:
            return OneOf(alive), []
        if complete:
            return None, []
        return None, accepted


def to_call(value: object) -> Call:
    """
    Coerce *value* into a pattern.

    ``Call`` instances are returned unchanged, ``str`` and ``int`` become a
    ``Label``, ``None`` becomes the empty pattern, and any other iterable
    becomes an ``InOrder`` of its coerced items.

    Raises:
        TypeError: If *value* cannot be interpreted as a pattern.
    """
    if isinstance(value, Call):
        return value
    if isinstance(value, (str, int)):
        return Label(str(value))
    if value is None:
        return InOrder(())
    try:
        items = iter(value)  # type: ignore[call-overload]
    except TypeError:
        raise TypeError(
            f"Cannot use {type(value).__name__} as an expected call pattern"
        ) from None
    return InOrder(to_call(item) for item in items)


def find_mismatch(
    pattern: Call, labels: Sequence[str],
) -> Optional[Tuple[int, Tuple[str, ...]]]:
    """
    Find where *labels* stop matching *pattern*.

    Args:
        pattern: The expected pattern.
        labels: Recorded labels in record order.

    Returns:
        ``None`` when the labels match.  Otherwise ``(index, expected)``:
        *index* is the divergence index (``len(labels)`` when the calls
        ran out early) and *expected* the sorted labels the pattern would
        have accepted there (empty when it expected no more calls).
    """
    for index, label in enumerate(labels):
        rest, accepted = pattern.advance(label)
        if rest is None:
            return index, tuple(sorted(set(accepted)))
        pattern = rest

    _, accepted = pattern.advance(None)
    if not accepted:
        return None
    return len(labels), tuple(sorted(set(accepted)))
