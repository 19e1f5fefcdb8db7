"""Lexer for filter expressions."""

from __future__ import annotations

import re

import ply.lex as lex

from catalog_tables.errors import FilterSyntaxError

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


def _unescape(match: re.Match[str]) -> str:
    char = match.group(1)
    return _ESCAPES.get(char, char)


class FilterLexer:
    """Lexer for tokenizing filter expressions such as ``RA >= 10 and Name contains "N"``."""

    # Reserved keywords
    reserved = {
        "and": "AND",
        "or": "OR",
        "not": "NOT",
        "between": "BETWEEN",
        "contains": "CONTAINS",
        "icontains": "ICONTAINS",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "NUMBER",
        "STRING",
        "LPAREN",
        "RPAREN",
        "EQ",
        "NEQ",
        "LTE",
        "GTE",
    ] + list(reserved.values())

    # Simple tokens
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_EQ = r"==?"
    t_NEQ = r"!="
    t_LTE = r"<="
    t_GTE = r">="

    # Ignored characters
    t_ignore = " \t\r\n"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"[-+]?(?:(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?|inf\b)"
        t.value = float(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"|\'([^\'\\]|\\.)*\''
        # Remove quotes and handle escapes
        t.value = _ESCAPE.sub(_unescape, t.value[1:-1])
        return t

    def t_BACKTICK_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"`[^`]+`"
        # Backticks allow column names with spaces or clashing with keywords
        t.value = t.value[1:-1]
        t.type = "IDENTIFIER"
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_.:\-]*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise FilterSyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
