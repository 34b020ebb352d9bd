"""
Pattern expression utilities.

Convenience functions for parsing expected-call patterns from text and
turning them back into text.
"""

from __future__ import annotations

from typing import FrozenSet

from callorder.core.pattern import Call, to_call
from callorder.parser.grammar import PatternParser


_parser = PatternParser()


def parse_pattern(text: str) -> Call:
    """
    Parse a pattern expression into a ``Call`` tree.

    ``a, b`` means in order, ``a | b`` one of, ``a & b`` interleaved,
    ``()`` no calls.  Labels that are not plain words can be quoted.

    Raises:
        LexerError: If the text contains an invalid character.
        ParseError: If the expression is syntactically invalid.
    """
    return _parser.parse(text)


def labels(pattern: object) -> FrozenSet[str]:
    """Return every label mentioned in *pattern*."""
    return to_call(pattern).labels()


def to_string(pattern: object) -> str:
    """Render *pattern* as an expression that :func:`parse_pattern` accepts."""
    return str(to_call(pattern))
