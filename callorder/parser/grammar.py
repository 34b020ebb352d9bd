"""
Parser for expected-call pattern expressions.

Implements a grammar with proper precedence rules to parse pattern strings
into ``Call`` trees.
"""

from __future__ import annotations

from typing import List, Type

import sly

from callorder.core.pattern import Call, InOrder, Interleaved, Label, OneOf
from callorder.parser.lexer import PatternLexer


class ParseError(Exception):
    """Exception raised for parsing errors."""

    pass


def _collapse(kind: Type[Call], items: List[Call]) -> Call:
    """A group of one item is just that item."""
    if len(items) == 1:
        return items[0]
    return kind(items)


class _SLYParser(sly.Parser):
    """
    SLY-based parser for pattern expressions.

    Precedence (lowest to highest):
        1. ,   (in order)
        2. |   (one of)
        3. &   (interleaved)

    Each level is its own nonterminal collecting a flat list, so
    ``a, b, c`` is one three-item group rather than nested pairs.
    """

    tokens = PatternLexer.tokens

    start = "pattern"

    @_("sequence")
    def pattern(self, p):
        return _collapse(InOrder, p.sequence)

    # --- In order ---

    @_("sequence COMMA alternatives")
    def sequence(self, p):
        return p.sequence + [_collapse(OneOf, p.alternatives)]

    @_("alternatives")
    def sequence(self, p):
        return [_collapse(OneOf, p.alternatives)]

    # --- One of ---

    @_("alternatives OR branches")
    def alternatives(self, p):
        return p.alternatives + [_collapse(Interleaved, p.branches)]

    @_("branches")
    def alternatives(self, p):
        return [_collapse(Interleaved, p.branches)]

    # --- Interleaved ---

    @_("branches AND atom")
    def branches(self, p):
        return p.branches + [p.atom]

    @_("atom")
    def branches(self, p):
        return [p.atom]

    # --- Atoms ---

    @_("LABEL")
    def atom(self, p):
        return Label(p.LABEL)

    @_("STRING")
    def atom(self, p):
        return Label(p.STRING)

    @_("LPAREN pattern RPAREN")
    def atom(self, p):
        return p.pattern

    @_("LPAREN RPAREN")
    def atom(self, p):
        return InOrder(())

    def error(self, token):
        if token:
            raise ParseError(
                f"Syntax error at '{token.value}' " f"(type: {token.type}, index: {token.index})"
            )
        raise ParseError("Syntax error: unexpected end of pattern")


class PatternParser:
    """
    Parser for pattern expressions.

    Wraps the SLY-based parser with a clean public interface.
    """

    def __init__(self) -> None:
        self._lexer = PatternLexer()
        self._parser = _SLYParser()

    def parse(self, text: str) -> Call:
        """
        Parse a pattern string into a ``Call`` tree.

        Args:
            text: The pattern expression.

        Returns:
            The root node of the pattern.

        Raises:
            LexerError: If the text contains an invalid character.
            ParseError: If the expression is syntactically invalid.
        """
        text = text.strip()
        if not text:
            raise ParseError("Syntax error: empty pattern")

        result = self._parser.parse(self._lexer.tokenize(text))
        if result is None:
            raise ParseError("Syntax error: could not parse pattern")
        return result
