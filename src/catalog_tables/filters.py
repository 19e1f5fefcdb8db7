"""Composable filter expressions evaluated through table views.

Leaf filters call the corresponding :class:`TableView` operation.
``AND`` narrows a view successively, ``OR`` evaluates every branch on a
copy of the incoming view and unions the results, and ``NOT`` removes
the rows its branch would keep.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

from catalog_tables.indices import ComparisonMode, IndexList

if TYPE_CHECKING:
    from catalog_tables.columns import Column
    from catalog_tables.table import Table
    from catalog_tables.view import TableView

ColumnRef = Union["Column", int, str]


class LogicalOperator(Enum):
    AND = "and"
    OR = "or"


class Filter:
    """Base class for filter expressions."""

    def apply(self, view: TableView) -> bool:
        """Narrow ``view`` in place; return False (view unchanged) if inapplicable."""
        raise NotImplementedError

    def execute(self, table: Table) -> IndexList:
        """Return the ascending row indices of ``table`` matching this filter."""
        view = table.view()
        if not self.apply(view):
            return []
        return view.indices()


@dataclass
class NumericFilter(Filter):
    column: ColumnRef
    mode: ComparisonMode
    lo: float
    hi: float = math.nan

    def apply(self, view: TableView) -> bool:
        return view.numeric_filter(self.column, self.mode, self.lo, self.hi)


@dataclass
class StringFilter(Filter):
    column: ColumnRef
    search_string: str
    case_insensitive: bool = False

    def apply(self, view: TableView) -> bool:
        return view.string_filter(self.column, self.search_string, self.case_insensitive)


@dataclass
class LogicalFilter(Filter):
    """Conjunction or disjunction of one or more filters."""

    operator: LogicalOperator
    filters: list[Filter] = field(default_factory=list)

    def apply(self, view: TableView) -> bool:
        if not self.filters:
            return False

        working = view.copy()
        if self.operator == LogicalOperator.AND:
            for child in self.filters:
                if not child.apply(working):
                    return False
        else:
            branches = []
            for child in self.filters:
                branch = view.copy()
                if not child.apply(branch):
                    return False
                branches.append(branch)
            working = branches[0]
            for branch in branches[1:]:
                if not working.combine(branch):
                    return False

        return view.replace_with(working)


@dataclass
class NotFilter(Filter):
    """Rows of the incoming view that ``filter`` rejects."""

    filter: Filter

    def apply(self, view: TableView) -> bool:
        if not view.ordered:
            return False
        rejected = view.copy()
        if not self.filter.apply(rejected) or not rejected.invert():
            return False
        working = view.copy()
        if not working.intersect(rejected):
            return False
        return view.replace_with(working)