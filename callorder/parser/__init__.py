"""
Pattern expression parser for callorder.

Provides lexical analysis and parsing of textual expected-call patterns
(``open, (read & stat), close``) into ``Call`` trees.
"""
