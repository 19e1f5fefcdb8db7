"""Element types and column descriptors for catalog tables."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any


class DataType(Enum):
    """Category tag shared by every column of the same kind."""

    TEXT = "text"
    FLOAT64 = "float64"
    FLOAT_GENERIC = "float_generic"
    INT64 = "int64"
    INT_GENERIC = "int_generic"
    UNSUPPORTED = "unsupported"

    @property
    def is_numeric(self) -> bool:
        return self not in (DataType.TEXT, DataType.UNSUPPORTED)


class ElementType(Enum):
    """Storage kinds a column can decode into, one per supported width."""

    TEXT = "string"
    UINT8 = "uint8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float"
    FLOAT64 = "double"

    @property
    def size_bytes(self) -> int:
        """Return the size in bytes of one entry (one character for text)."""
        sizes = {
            ElementType.TEXT: 1,
            ElementType.UINT8: 1,
            ElementType.INT16: 2,
            ElementType.INT32: 4,
            ElementType.INT64: 8,
            ElementType.FLOAT32: 4,
            ElementType.FLOAT64: 8,
        }
        return sizes[self]

    @property
    def typecode(self) -> str:
        """Return the ``array`` module typecode used for entry storage."""
        codes = {
            ElementType.UINT8: "B",
            ElementType.INT16: "h",
            ElementType.INT32: "i",
            ElementType.INT64: "q",
            ElementType.FLOAT32: "f",
            ElementType.FLOAT64: "d",
        }
        if self not in codes:
            raise TypeError(f"{self.value} entries are not stored in an array")
        return codes[self]

    @property
    def data_type(self) -> DataType:
        categories = {
            ElementType.TEXT: DataType.TEXT,
            ElementType.UINT8: DataType.INT_GENERIC,
            ElementType.INT16: DataType.INT_GENERIC,
            ElementType.INT32: DataType.INT_GENERIC,
            ElementType.INT64: DataType.INT64,
            ElementType.FLOAT32: DataType.FLOAT_GENERIC,
            ElementType.FLOAT64: DataType.FLOAT64,
        }
        return categories[self]

    @property
    def is_float(self) -> bool:
        return self in (ElementType.FLOAT32, ElementType.FLOAT64)

    @property
    def empty_value(self) -> Any:
        """Return the value stored for a missing field."""
        if self == ElementType.TEXT:
            return ""
        if self.is_float:
            return math.nan
        return 0

    @property
    def lowest(self) -> float | int:
        """Return the lowest representable value of a numeric type."""
        return _NUMERIC_BOUNDS[self][0]

    @property
    def highest(self) -> float | int:
        """Return the highest representable value of a numeric type."""
        return _NUMERIC_BOUNDS[self][1]


_FLOAT32_MAX = 3.4028234663852886e38

_NUMERIC_BOUNDS: dict[ElementType, tuple[float | int, float | int]] = {
    ElementType.UINT8: (0, 0xFF),
    ElementType.INT16: (-(1 << 15), (1 << 15) - 1),
    ElementType.INT32: (-(1 << 31), (1 << 31) - 1),
    ElementType.INT64: (-(1 << 63), (1 << 63) - 1),
    ElementType.FLOAT32: (-_FLOAT32_MAX, _FLOAT32_MAX),
    ElementType.FLOAT64: (-1.7976931348623157e308, 1.7976931348623157e308),
}


# Declared (VOTable vocabulary) type names that decode into a column.
# Every other declared type produces an unsupported column.
DECLARED_TYPE_NAMES: dict[str, ElementType] = {
    "char": ElementType.TEXT,
    "unsignedByte": ElementType.UINT8,
    "short": ElementType.INT16,
    "int": ElementType.INT32,
    "long": ElementType.INT64,
    "float": ElementType.FLOAT32,
    "double": ElementType.FLOAT64,
}


@dataclass(frozen=True)
class ColumnDescriptor:
    """Metadata describing one column, supplied before population.

    ``array_size`` keeps the raw declaration ("" for scalars, "6", "*",
    "3x2", ...). ``byte_offset`` is the position of the field inside a
    binary row record and is only meaningful for binary sources.
    """

    name: str
    declared_type: str
    id: str = ""
    unit: str = ""
    ucd: str = ""
    description: str = ""
    array_size: str = ""
    byte_offset: int | None = None

    @property
    def is_array(self) -> bool:
        return bool(self.array_size)

    @property
    def fixed_length(self) -> int | None:
        """Return the element count of a fixed one-dimensional array, if any."""
        if self.array_size.isdigit() and int(self.array_size) > 0:
            return int(self.array_size)
        return None

    @property
    def element_type(self) -> ElementType | None:
        """Return the storage kind for this descriptor, or None if unsupported."""
        element_type = DECLARED_TYPE_NAMES.get(self.declared_type)
        if element_type is None:
            return None
        # Only character arrays decode; any other array is skipped
        if self.is_array and element_type != ElementType.TEXT:
            return None
        return element_type
