"""
Lexical analyzer for expected-call pattern expressions.

Tokenizes pattern strings such as ``open, (read & stat), close`` into a
stream of tokens (labels, operators, delimiters) for the parser.
"""

from __future__ import annotations

import re

import sly

_ESCAPE = re.compile(r"\\(.)")
_CONTROL = {"n": "\n", "r": "\r", "t": "\t"}


def _unescape(text: str) -> str:
    """Decode backslash escapes: ``\\n``, ``\\r`` and ``\\t`` are control characters."""
    return _ESCAPE.sub(lambda m: _CONTROL.get(m.group(1), m.group(1)), text)


class LexerError(Exception):
    """Exception raised for lexical analysis errors."""
    pass


class PatternLexer(sly.Lexer):
    """
    Lexical analyzer for pattern expressions.

    Token Types:
        LABEL           - Bare call labels (``open``, ``1``, ``db.query``)
        STRING          - Quoted call labels (``"two words"``)
        COMMA           - In-order separator
        OR              - One-of separator
        AND             - Interleaved separator
        LPAREN, RPAREN  - Delimiters
    """

    tokens = {
        LABEL, STRING,
        COMMA, OR, AND,
        LPAREN, RPAREN,
    }

    # Ignored characters
    ignore = " \t\r"

    # Ignore newlines
    @_(r"\n+")
    def ignore_newline(self, t):
        self.lineno += len(t.value)

    # Ignore comments (# to end of line)
    ignore_comment = r"\#[^\n]*"

    COMMA = r","
    OR = r"\|"
    AND = r"&"
    LPAREN = r"\("
    RPAREN = r"\)"

    LABEL = r"[A-Za-z0-9_][A-Za-z0-9_.:\-]*"

    # Double or single quoted; a backslash escapes the next character
    @_(r'"(?:[^"\\\n]|\\.)*"', r"'(?:[^'\\\n]|\\.)*'")
    def STRING(self, t):
        t.value = _unescape(t.value[1:-1])
        return t

    def error(self, t):
        """Handle invalid characters."""
        raise LexerError(
            f"Invalid character '{t.value[0]}' at index {self.index}"
        )
