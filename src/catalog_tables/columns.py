"""Column model: a non-generic column handle plus one typed column per width."""

from __future__ import annotations

import math
from array import array
from typing import Any, ClassVar, TypeVar

from catalog_tables import indices
from catalog_tables.decoding import decode_buffer, decode_text, to_float32
from catalog_tables.indices import ComparisonMode, IndexList
from catalog_tables.types import ColumnDescriptor, DataType, ElementType

C = TypeVar("C", bound="DataColumn")


class Column:
    """A column of a table.

    The base class is also the representation of unsupported columns:
    it keeps the descriptor metadata so the table shape is preserved,
    holds no entries, and refuses every per-row operation.
    """

    element_type: ClassVar[ElementType | None] = None

    def __init__(self, descriptor: ColumnDescriptor) -> None:
        self.descriptor = descriptor
        self.name = descriptor.name
        self.id = descriptor.id
        self.unit = descriptor.unit
        self.ucd = descriptor.ucd
        self.description = descriptor.description
        self.declared_type = descriptor.declared_type
        self.byte_offset = descriptor.byte_offset or 0

    @classmethod
    def from_descriptor(cls, descriptor: ColumnDescriptor) -> Column:
        """Build the column variant matching a descriptor's declared type."""
        element_type = descriptor.element_type
        if element_type is None:
            return Column(descriptor)
        return COLUMN_TYPES[element_type](descriptor)

    @property
    def data_type(self) -> DataType:
        return DataType.UNSUPPORTED

    @property
    def is_supported(self) -> bool:
        return self.data_type != DataType.UNSUPPORTED

    @property
    def data_type_size(self) -> int:
        """Return the byte width of one entry (0 when nothing is decoded)."""
        return 0

    @property
    def field_width(self) -> int:
        """Return the number of bytes one row occupies in a binary record."""
        return 0

    @property
    def type_label(self) -> str:
        if self.descriptor.is_array:
            return f"{self.declared_type}[{self.descriptor.array_size}]"
        return self.declared_type or "unknown"

    @property
    def num_entries(self) -> int:
        return 0

    def info(self) -> str:
        """Return a one-line human-readable summary of the column."""
        if self.is_supported:
            type_string = self.type_label
        else:
            type_string = f"{self.type_label} (unsupported)"
        unit_string = f"Unit: {self.unit}; " if self.unit else ""
        description_string = f"Description: {self.description}; " if self.description else ""
        return f"Name: {self.name}; Type: {type_string}; {unit_string}{description_string}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, entries={self.num_entries})"

    # Population. Unsupported columns ignore every call.

    def fill_from_text(self, text: str | None) -> None:
        pass

    def fill_empty(self) -> None:
        pass

    def resize(self, capacity: int) -> None:
        pass

    def decode_buffer(self, buffer: bytes | bytearray | memoryview, num_rows: int, stride: int) -> int:
        return 0

    # Row operations. Unsupported columns report failure.

    def sort_indices(self, index_list: IndexList, ascending: bool = True) -> bool:
        return False

    def filter_indices(
        self,
        candidates: IndexList | None,
        mode: ComparisonMode,
        lo: float,
        hi: float = math.nan,
    ) -> IndexList | None:
        return None

    def search_indices(
        self,
        candidates: IndexList | None,
        needle: str,
        case_insensitive: bool = False,
    ) -> IndexList | None:
        return None


class DataColumn(Column):
    """Column holding decoded entries, one per table row."""

    element_type: ClassVar[ElementType]

    def __init__(self, descriptor: ColumnDescriptor) -> None:
        super().__init__(descriptor)
        self.entries: Any = self._new_storage()

    def _new_storage(self) -> Any:
        return array(self.element_type.typecode)

    @classmethod
    def try_cast(cls: type[C], column: Column | None) -> C | None:
        """Return ``column`` if it is a supported column of this class, else None."""
        if column is None or not column.is_supported:
            return None
        if isinstance(column, cls):
            return column
        return None

    @property
    def data_type(self) -> DataType:
        return self.element_type.data_type

    @property
    def data_type_size(self) -> int:
        return self.element_type.size_bytes

    @property
    def field_width(self) -> int:
        return self.element_type.size_bytes

    @property
    def type_label(self) -> str:
        return self.element_type.value

    @property
    def num_entries(self) -> int:
        return len(self.entries)

    def fill_from_text(self, text: str | None) -> None:
        self.entries.append(decode_text(self.element_type, text))

    def fill_empty(self) -> None:
        self.entries.append(self.element_type.empty_value)

    def resize(self, capacity: int) -> None:
        """Grow (padding with empty values) or shrink the entries to ``capacity``."""
        current = len(self.entries)
        if capacity < current:
            del self.entries[capacity:]
        elif capacity > current:
            self.entries.extend(self._padding(capacity - current))

    def _padding(self, count: int) -> Any:
        return array(self.element_type.typecode, [self.element_type.empty_value]) * count

    def decode_buffer(self, buffer: bytes | bytearray | memoryview, num_rows: int, stride: int) -> int:
        """Decode this column's field from every record of a binary row buffer."""
        return decode_buffer(
            self.element_type,
            self.entries,
            buffer,
            num_rows,
            self.byte_offset,
            stride,
            self.field_width,
        )

    def sort_indices(self, index_list: IndexList, ascending: bool = True) -> bool:
        indices.sort_indices(self.entries, index_list, ascending)
        return True


class TextColumn(DataColumn):
    element_type = ElementType.TEXT

    def _new_storage(self) -> list[str]:
        return []

    def _padding(self, count: int) -> list[str]:
        return [""] * count

    @property
    def field_width(self) -> int:
        return self.descriptor.fixed_length or 0

    def search_indices(
        self,
        candidates: IndexList | None,
        needle: str,
        case_insensitive: bool = False,
    ) -> IndexList | None:
        return indices.filter_substring(self.entries, candidates, needle, case_insensitive)


class NumericColumn(DataColumn):
    """Shared behaviour of the fixed-width numeric columns."""

    def native_threshold(self, value: float, upper: bool = False) -> float | int:
        """Convert a filter threshold into this column's value domain.

        Non-finite thresholds stand for "unbounded" and map to the lowest
        (or, for ``upper``, the highest) representable value.
        """
        if value is None or not math.isfinite(value):
            return self.element_type.highest if upper else self.element_type.lowest
        return value

    def filter_indices(
        self,
        candidates: IndexList | None,
        mode: ComparisonMode,
        lo: float,
        hi: float = math.nan,
    ) -> IndexList | None:
        typed_lo = self.native_threshold(lo)
        typed_hi = self.native_threshold(hi, upper=True)
        return indices.filter_numeric(self.entries, candidates, mode, typed_lo, typed_hi)


class FloatColumn(NumericColumn):
    element_type = ElementType.FLOAT32

    def native_threshold(self, value: float, upper: bool = False) -> float | int:
        threshold = super().native_threshold(value, upper)
        return to_float32(float(threshold))


class DoubleColumn(NumericColumn):
    element_type = ElementType.FLOAT64

    def native_threshold(self, value: float, upper: bool = False) -> float | int:
        return float(super().native_threshold(value, upper))


class UInt8Column(NumericColumn):
    element_type = ElementType.UINT8


class Int16Column(NumericColumn):
    element_type = ElementType.INT16


class Int32Column(NumericColumn):
    element_type = ElementType.INT32


class Int64Column(NumericColumn):
    element_type = ElementType.INT64


COLUMN_TYPES: dict[ElementType, type[DataColumn]] = {
    ElementType.TEXT: TextColumn,
    ElementType.UINT8: UInt8Column,
    ElementType.INT16: Int16Column,
    ElementType.INT32: Int32Column,
    ElementType.INT64: Int64Column,
    ElementType.FLOAT32: FloatColumn,
    ElementType.FLOAT64: DoubleColumn,
}
