"""Views over a table: filtering, sorting and value extraction by row index."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Union

from catalog_tables import indices
from catalog_tables.columns import Column, DataColumn
from catalog_tables.indices import ComparisonMode, IndexList
from catalog_tables.types import ElementType

if TYPE_CHECKING:
    from catalog_tables.table import Table

logger = logging.getLogger(__name__)

ColumnKey = Union[Column, int, str, None]


class TableView:
    """A selection and ordering of the rows of one table.

    A view never copies table data. It holds a reference to its table and,
    once narrowed or sorted, an explicit index list. Without an index list
    the view covers every row in row order.

    Every mutating operation returns True on success. When an operation
    does not apply (wrong column type, unordered indices, missing column)
    it returns False and leaves the view unchanged.
    """

    def __init__(self, table: Table, index_list: IndexList | None = None, ordered: bool = True) -> None:
        self._table = table
        self._subset_indices: IndexList | None = list(index_list) if index_list is not None else None
        self._ordered = ordered if index_list is not None else True

    @property
    def table(self) -> Table:
        return self._table

    @property
    def is_subset(self) -> bool:
        return self._subset_indices is not None

    @property
    def ordered(self) -> bool:
        return self._ordered

    def num_rows(self) -> int:
        if self._subset_indices is not None:
            return len(self._subset_indices)
        return self._table.num_rows

    def __len__(self) -> int:
        return self.num_rows()

    def __repr__(self) -> str:
        kind = "subset" if self.is_subset else "full"
        return f"TableView({kind}, rows={self.num_rows()}, ordered={self._ordered})"

    def indices(self) -> IndexList:
        """Return the visible row indices in view order."""
        if self._subset_indices is None:
            return indices.identity(self._table.num_rows)
        return list(self._subset_indices)

    def copy(self) -> TableView:
        """Return an independent view with the same selection and order."""
        return TableView(self._table, self._subset_indices, self._ordered)

    def reset(self) -> None:
        """Return to the full-table view."""
        self._set_full()

    def replace_with(self, other: TableView) -> bool:
        """Adopt the selection and order of another view of the same table."""
        if other._table is not self._table:
            return False
        self._subset_indices = other.indices() if other.is_subset else None
        self._ordered = other._ordered
        return True

    def _set_full(self) -> None:
        self._subset_indices = None
        self._ordered = True

    def _set_subset(self, index_list: IndexList) -> None:
        # Collapsing an unordered view would drop its sort order
        if self._ordered and len(index_list) == self._table.num_rows:
            self._set_full()
        else:
            self._subset_indices = index_list

    def _resolve(self, column: ColumnKey) -> Column | None:
        return self._table.resolve(column)

    # Filtering

    def numeric_filter(
        self,
        column: ColumnKey,
        mode: ComparisonMode,
        lo: float,
        hi: float = math.nan,
    ) -> bool:
        """Keep the rows whose value in a numeric column satisfies ``mode``.

        ``lo`` is the threshold of the single-value modes; the inclusive
        range mode uses ``[lo, hi]``. Non-finite thresholds leave that side
        unbounded.
        """
        resolved = self._resolve(column)
        if resolved is None:
            return False
        matching = resolved.filter_indices(self._subset_indices, mode, lo, hi)
        if matching is None:
            logger.debug("Numeric filter does not apply to column %r", resolved.name)
            return False
        self._set_subset(matching)
        return True

    def string_filter(self, column: ColumnKey, search_string: str, case_insensitive: bool = False) -> bool:
        """Keep the rows whose value in a text column contains ``search_string``."""
        resolved = self._resolve(column)
        if resolved is None:
            return False
        matching = resolved.search_indices(self._subset_indices, search_string, case_insensitive)
        if matching is None:
            logger.debug("String filter does not apply to column %r", resolved.name)
            return False
        self._set_subset(matching)
        return True

    # Set algebra

    def invert(self) -> bool:
        """Select exactly the rows that are currently not selected."""
        if self._subset_indices is None:
            self._subset_indices = []
            self._ordered = True
        elif not self._subset_indices:
            self._set_full()
        elif self._ordered:
            self._subset_indices = indices.invert_indices(self._subset_indices, self._table.num_rows)
        else:
            return False
        return True

    def combine(self, other: TableView) -> bool:
        """Replace this selection with its union with ``other``."""
        if other._table is not self._table:
            return False
        if self._subset_indices is None or other._subset_indices is None:
            self._set_full()
            return True
        if not (self._ordered and other._ordered):
            return False
        self._set_subset(indices.union_indices(self._subset_indices, other._subset_indices))
        return True

    def intersect(self, other: TableView) -> bool:
        """Replace this selection with its intersection with ``other``."""
        if other._table is not self._table:
            return False
        if not (self._ordered and other._ordered):
            return False
        if other._subset_indices is None:
            return True
        if self._subset_indices is None:
            self._subset_indices = list(other._subset_indices)
            return True
        self._set_subset(indices.intersect_indices(self._subset_indices, other._subset_indices))
        return True

    # Sorting

    def sort_by_column(self, column: ColumnKey, ascending: bool = True) -> bool:
        """Order the visible rows by their values in ``column``."""
        resolved = self._resolve(column)
        if resolved is None or not resolved.is_supported:
            return False

        index_list = self.indices()
        if not resolved.sort_indices(index_list, ascending):
            return False
        self._subset_indices = index_list
        # A value-sorted list is never treated as row ordered
        self._ordered = False
        return True

    def sort_by_index(self) -> bool:
        """Restore row order."""
        if not self._ordered and self._subset_indices is not None:
            self._subset_indices.sort()
        self._ordered = True
        return True

    # Extraction

    def values(
        self,
        column: ColumnKey,
        start: int = 0,
        end: int = -1,
        as_type: type[DataColumn] | ElementType | None = None,
    ) -> list[Any]:
        """Return a column's entries for the view rows ``[start, end)``.

        ``start`` and ``end`` count view rows, not table rows; a negative
        ``end`` reads to the end of the view. When ``as_type`` is given and
        the column is not of that type, the result is empty.
        """
        resolved = self._resolve(column)
        if isinstance(as_type, ElementType):
            if resolved is None or resolved.element_type != as_type:
                return []
        elif as_type is not None:
            resolved = as_type.try_cast(resolved)
        data_column = DataColumn.try_cast(resolved)
        if data_column is None or data_column.num_entries == 0:
            return []

        entries = data_column.entries
        if self._subset_indices is None:
            begin, stop = indices.slice_bounds(len(entries), start, end)
            return list(entries[begin:stop])
        begin, stop = indices.slice_bounds(len(self._subset_indices), start, end)
        return [entries[i] for i in self._subset_indices[begin:stop]]
