"""Parser for filter expressions."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from catalog_tables.errors import FilterSyntaxError
from catalog_tables.filters import (
    Filter,
    LogicalFilter,
    LogicalOperator,
    NotFilter,
    NumericFilter,
    StringFilter,
)
from catalog_tables.indices import ComparisonMode
from catalog_tables.parsing.filter_lexer import FilterLexer


class FilterParser:
    """Parser turning filter expressions into :mod:`catalog_tables.filters` nodes.

    Examples of accepted input::

        RA >= 10
        RA between 10 and 300 and not Name contains "N 6"
        (e_RVel = 3 or e_RVel = 5) and Name icontains 'n'
    """

    tokens = FilterLexer.tokens

    # Operator precedence
    precedence = (
        ("left", "OR"),
        ("left", "AND"),
        ("right", "NOT"),
    )

    def __init__(self) -> None:
        self.lexer = FilterLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : condition"""
        p[0] = p[1]

    def p_condition_comparison(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER EQ NUMBER
                     | IDENTIFIER NEQ NUMBER
                     | IDENTIFIER GTE NUMBER
                     | IDENTIFIER LTE NUMBER"""
        op_map = {
            "=": ComparisonMode.EQUAL,
            "==": ComparisonMode.EQUAL,
            "!=": ComparisonMode.NOT_EQUAL,
            ">=": ComparisonMode.GREATER_OR_EQUAL,
            "<=": ComparisonMode.LESSER_OR_EQUAL,
        }
        p[0] = NumericFilter(column=p[1], mode=op_map[p[2]], lo=p[3])

    def p_condition_between(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER BETWEEN NUMBER AND NUMBER"""
        p[0] = NumericFilter(column=p[1], mode=ComparisonMode.RANGE_INCLUSIVE, lo=p[3], hi=p[5])

    def p_condition_contains(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER CONTAINS STRING
                     | IDENTIFIER ICONTAINS STRING"""
        p[0] = StringFilter(column=p[1], search_string=p[3], case_insensitive=p[2].lower() == "icontains")

    def p_condition_not(self, p: yacc.YaccProduction) -> None:
        """condition : NOT condition"""
        cond = p[2]
        # Double negation cancels out
        p[0] = cond.filter if isinstance(cond, NotFilter) else NotFilter(filter=cond)

    def p_condition_and(self, p: yacc.YaccProduction) -> None:
        """condition : condition AND condition"""
        p[0] = _merge(LogicalOperator.AND, p[1], p[3])

    def p_condition_or(self, p: yacc.YaccProduction) -> None:
        """condition : condition OR condition"""
        p[0] = _merge(LogicalOperator.OR, p[1], p[3])

    def p_condition_paren(self, p: yacc.YaccProduction) -> None:
        """condition : LPAREN condition RPAREN"""
        p[0] = p[2]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise FilterSyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise FilterSyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Filter:
        """Parse a filter expression."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)


def _merge(operator: LogicalOperator, left: Filter, right: Filter) -> LogicalFilter:
    """Combine two filters, flattening chains of the same operator."""
    filters: list[Filter] = []
    for side in (left, right):
        if isinstance(side, LogicalFilter) and side.operator == operator:
            filters.extend(side.filters)
        else:
            filters.append(side)
    return LogicalFilter(operator=operator, filters=filters)
