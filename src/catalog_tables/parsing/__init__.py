"""Filter expression language."""

from catalog_tables.parsing.filter_lexer import FilterLexer
from catalog_tables.parsing.filter_parser import FilterParser

__all__ = [
    "FilterLexer",
    "FilterParser",
]
