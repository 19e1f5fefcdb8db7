"""Conversion of raw field values into native column entries.

Two entry points exist per element type:

* ``decode_text`` turns one textual field (an XML table cell) into a value.
* ``decode_buffer`` copies one fixed-width field out of every record of a
  binary row buffer. Binary catalogs are stored big-endian, so multi-byte
  numeric entries are byte-swapped on little-endian hosts after the copy.
"""

from __future__ import annotations

import logging
import math
import struct
import sys
from array import array
from typing import Any

from catalog_tables.types import ElementType

logger = logging.getLogger(__name__)

_NATIVE_IS_LITTLE_ENDIAN = sys.byteorder == "little"


def to_float32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""
    if math.isfinite(value):
        value = min(max(value, ElementType.FLOAT32.lowest), ElementType.FLOAT32.highest)
    return struct.unpack("<f", struct.pack("<f", value))[0]


def saturate(value: int, element_type: ElementType) -> int:
    """Clamp an integer into the representable range of ``element_type``."""
    return min(max(value, element_type.lowest), element_type.highest)  # type: ignore[type-var]


def _parse_int(text: str) -> int:
    try:
        if text.lower().startswith(("0x", "-0x", "+0x")):
            return int(text, 16)
        return int(text, 10)
    except ValueError:
        pass
    # Fall back to the leading numeric part, e.g. "12.0" or "3e2"
    try:
        number = float(text)
    except ValueError:
        return 0
    return int(number) if math.isfinite(number) else 0


def decode_text(element_type: ElementType, text: str | None) -> Any:
    """Decode a single textual field into the native value of ``element_type``.

    Missing or blank fields map to the element type's empty value. Values
    that cannot be parsed map to the empty value as well; an out-of-range
    integer saturates to the nearest bound.
    """
    if element_type == ElementType.TEXT:
        return text if text is not None else ""

    if text is None:
        return element_type.empty_value
    stripped = text.strip()
    if not stripped:
        return element_type.empty_value

    if element_type.is_float:
        try:
            value = float(stripped)
        except ValueError:
            return math.nan
        if element_type == ElementType.FLOAT32:
            return to_float32(value)
        return value

    return saturate(_parse_int(stripped), element_type)


def _decode_chars(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].rstrip(b" ").decode("ascii", errors="replace")


def decode_buffer(
    element_type: ElementType,
    entries: array | list[str],
    buffer: bytes | bytearray | memoryview,
    num_rows: int,
    offset: int,
    stride: int,
    width: int,
) -> int:
    """Decode ``num_rows`` fixed-width fields from a row buffer into ``entries``.

    Field ``row`` starts at ``offset + row * stride`` and spans ``width``
    bytes. ``entries`` must already be sized to hold ``num_rows`` values;
    rows ``[0, num_rows)`` are overwritten in place.

    Returns the number of rows decoded. Zero stride, zero width or a row
    count above the pre-sized capacity decode nothing. Rows whose field
    would extend past the end of ``buffer`` are left untouched.
    """
    if stride <= 0 or width <= 0 or num_rows <= 0 or num_rows > len(entries):
        logger.debug(
            "Skipping buffer decode: rows=%d stride=%d width=%d capacity=%d",
            num_rows,
            stride,
            width,
            len(entries),
        )
        return 0

    data = memoryview(buffer).cast("B")
    if offset < 0 or offset + width > len(data):
        logger.debug("Skipping buffer decode: field at offset %d lies outside buffer", offset)
        return 0
    available = (len(data) - offset - width) // stride + 1
    if available < num_rows:
        logger.debug("Row buffer holds %d of %d requested rows", available, num_rows)
        num_rows = available

    if element_type == ElementType.TEXT:
        for row in range(num_rows):
            start = offset + row * stride
            entries[row] = _decode_chars(bytes(data[start : start + width]))
        return num_rows

    if width != element_type.size_bytes:
        logger.debug("Skipping buffer decode: width %d does not match %s", width, element_type.value)
        return 0

    packed = bytearray(width * num_rows)
    for row in range(num_rows):
        start = offset + row * stride
        packed[row * width : (row + 1) * width] = data[start : start + width]

    decoded = array(element_type.typecode)
    decoded.frombytes(bytes(packed))
    if width > 1 and _NATIVE_IS_LITTLE_ENDIAN:
        decoded.byteswap()
    entries[:num_rows] = decoded
    return num_rows
