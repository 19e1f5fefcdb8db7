"""In-memory columnar tables built from column descriptors and row data."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol, runtime_checkable

from catalog_tables.columns import Column
from catalog_tables.errors import CatalogError
from catalog_tables.types import ColumnDescriptor
from catalog_tables.view import TableView

logger = logging.getLogger(__name__)


@runtime_checkable
class TextRowSource(Protocol):
    """Collaborator handing over one list of field texts per row."""

    def rows(self) -> Iterator[Sequence[str | None]]: ...


@runtime_checkable
class BinaryRowSource(Protocol):
    """Collaborator handing over fixed-stride binary records."""

    def row_count(self) -> int: ...

    def raw_buffer(self) -> tuple[bytes | bytearray | memoryview, int]: ...


class Table:
    """A read-only set of typed columns sharing one row count.

    Build a table from descriptors, then populate it once with either
    :meth:`populate_rows` (one text value per column per row) or
    :meth:`populate_buffer` (binary records). A table whose construction
    failed is marked invalid and holds no columns.
    """

    # Minimum row count before binary decoding fans out over threads
    PARALLEL_MIN_ROWS = 50_000

    def __init__(self, descriptors: Iterable[ColumnDescriptor] = ()) -> None:
        self._valid = True
        self._num_rows = 0
        self._columns: list[Column] = []
        self._column_name_map: dict[str, Column] = {}
        self._column_id_map: dict[str, Column] = {}

        for descriptor in descriptors:
            self._add_column(Column.from_descriptor(descriptor))

        if not self._columns:
            logger.warning("Table has no columns")
            self._valid = False

    def _add_column(self, column: Column) -> None:
        self._columns.append(column)
        if column.name:
            self._column_name_map[column.name] = column
        if column.id:
            self._column_id_map[column.id] = column

    @classmethod
    def from_rows(cls, descriptors: Iterable[ColumnDescriptor], rows: Iterable[Sequence[str | None]]) -> Table:
        """Build and populate a table using the streaming-text protocol."""
        table = cls(descriptors)
        if table.is_valid:
            table.populate_rows(rows)
        return table

    @classmethod
    def from_buffer(
        cls,
        descriptors: Iterable[ColumnDescriptor],
        buffer: bytes | bytearray | memoryview,
        num_rows: int,
        stride: int,
        max_workers: int | None = None,
    ) -> Table:
        """Build and populate a table using the buffered-binary protocol."""
        table = cls(descriptors)
        if table.is_valid:
            table.populate_buffer(buffer, num_rows, stride, max_workers=max_workers)
        return table

    def _invalidate(self) -> None:
        self._valid = False
        self._num_rows = 0
        self._columns = []
        self._column_name_map = {}
        self._column_id_map = {}

    @property
    def is_valid(self) -> bool:
        return self._valid

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def num_columns(self) -> int:
        return len(self._columns)

    @property
    def columns(self) -> list[Column]:
        return list(self._columns)

    # Population

    def populate_rows(self, rows: Iterable[Sequence[str | None]]) -> bool:
        """Append one entry per column for every row of field texts.

        Rows with fewer fields than columns are padded with empty values.
        A row with more fields than columns is malformed: the table is
        discarded and marked invalid.
        """
        num_columns = len(self._columns)
        for row in rows:
            if len(row) > num_columns:
                logger.error(
                    "Malformed table: row %d has %d fields for %d columns",
                    self._num_rows,
                    len(row),
                    num_columns,
                )
                self._invalidate()
                return False
            for column, text in zip(self._columns, row):
                column.fill_from_text(text)
            for column in self._columns[len(row) :]:
                column.fill_empty()
            self._num_rows += 1
        return True

    def populate_buffer(
        self,
        buffer: bytes | bytearray | memoryview,
        num_rows: int,
        stride: int,
        max_workers: int | None = None,
    ) -> bool:
        """Decode every column from a shared buffer of ``num_rows`` records.

        All columns are resized before any decoding starts; each column
        then decodes only into its own storage, so columns are decoded
        concurrently when the table is large enough. A negative row count,
        or a non-positive stride for a non-empty buffer, invalidates the
        table.
        """
        if num_rows < 0 or (num_rows > 0 and stride <= 0):
            logger.error("Malformed table: %d rows with a stride of %d bytes", num_rows, stride)
            self._invalidate()
            return False
        for column in self._columns:
            column.resize(num_rows)
        self._num_rows = num_rows
        if num_rows == 0:
            return True

        def decode(column: Column) -> int:
            return column.decode_buffer(buffer, num_rows, stride)

        if max_workers == 1 or num_rows < self.PARALLEL_MIN_ROWS or len(self._columns) < 2:
            decoded = [decode(column) for column in self._columns]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                decoded = list(executor.map(decode, self._columns))

        for column, count in zip(self._columns, decoded):
            if column.is_supported and count < num_rows:
                logger.warning("Column %r: decoded %d of %d rows", column.name, count, num_rows)
        return True

    # Lookup

    def column_by_index(self, index: int) -> Column | None:
        if 0 <= index < len(self._columns):
            return self._columns[index]
        return None

    def column_by_name(self, name: str) -> Column | None:
        return self._column_name_map.get(name)

    def column_by_id(self, column_id: str) -> Column | None:
        return self._column_id_map.get(column_id)

    def get_column(self, name_or_id: str) -> Column | None:
        """Look a column up by id first, then by name."""
        column = self.column_by_id(name_or_id)
        if column is None:
            column = self.column_by_name(name_or_id)
        return column

    def resolve(self, key: Column | int | str | None) -> Column | None:
        """Resolve a column object, position, id or name to a column of this table."""
        if key is None:
            return None
        if isinstance(key, Column):
            return key if key in self._columns else None
        if isinstance(key, bool):
            return None
        if isinstance(key, int):
            return self.column_by_index(key)
        if isinstance(key, str):
            return self.get_column(key)
        return None

    def __getitem__(self, key: int | str) -> Column:
        column = self.resolve(key)
        if column is None:
            if isinstance(key, int) and not isinstance(key, bool):
                raise IndexError(f"Column index {key} out of range [0, {len(self._columns)})")
            raise KeyError(key)
        return column

    def __contains__(self, key: Any) -> bool:
        return self.resolve(key) is not None

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def view(self) -> TableView:
        """Return a view covering every row of the table."""
        return TableView(self)

    def info(self, skip_unsupported: bool = True) -> str:
        """Return a multi-line summary of the table and its columns."""
        lines = [f"Rows: {self._num_rows}; Columns: {len(self._columns)};"]
        for column in self._columns:
            if not skip_unsupported or column.is_supported:
                lines.append(column.info())
        return "\n".join(lines)

    def __repr__(self) -> str:
        state = "valid" if self._valid else "invalid"
        return f"Table({state}, rows={self._num_rows}, columns={len(self._columns)})"


def open_table(
    descriptors: Iterable[ColumnDescriptor],
    row_source: Any = None,
    max_workers: int | None = None,
) -> Table:
    """Build a table from descriptors and populate it from ``row_source``.

    ``row_source`` may be a binary source (``row_count``/``raw_buffer``),
    a text source (``rows``), a plain iterable of rows, or None for a
    header-only table. Collaborator failures produce an invalid table.
    """
    try:
        table = Table(descriptors)
        if not table.is_valid or row_source is None:
            return table
        if isinstance(row_source, BinaryRowSource):
            num_rows = row_source.row_count()
            buffer, stride = row_source.raw_buffer()
            table.populate_buffer(buffer, num_rows, stride, max_workers=max_workers)
        elif isinstance(row_source, TextRowSource):
            table.populate_rows(row_source.rows())
        else:
            table.populate_rows(row_source)
    except CatalogError as error:
        logger.error("Could not read table: %s", error)
        table = Table()
    return table
