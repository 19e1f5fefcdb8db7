"""FITS binary table reader handing raw records to the buffered-binary protocol.

Only the first ``BINTABLE`` extension of a file is read. Its header cards
yield one column descriptor per field (``TTYPEn``, ``TFORMn``, ``TUNITn``,
``TCOMMn``, ``TUCDn``) with the byte offset of the field inside a row
record; the data unit is handed over unchanged as a big-endian buffer of
``NAXIS2`` records of ``NAXIS1`` bytes.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any, BinaryIO

from catalog_tables.errors import CatalogFormatError
from catalog_tables.types import ColumnDescriptor

logger = logging.getLogger(__name__)

_TFORM = re.compile(r"^\s*(\d*)\s*([LXBIJKAEDCMPQ])(.*)$")

# Bytes per element for each TFORM type letter
TFORM_WIDTHS: dict[str, int] = {
    "L": 1,
    "X": 1,
    "B": 1,
    "I": 2,
    "J": 4,
    "K": 8,
    "A": 1,
    "E": 4,
    "D": 8,
    "C": 8,
    "M": 16,
    "P": 8,
    "Q": 16,
}

# VOTable type names used for the descriptors of each TFORM type letter
TFORM_TYPE_NAMES: dict[str, str] = {
    "L": "boolean",
    "X": "bit",
    "B": "unsignedByte",
    "I": "short",
    "J": "int",
    "K": "long",
    "A": "char",
    "E": "float",
    "D": "double",
    "C": "floatComplex",
    "M": "doubleComplex",
}


def parse_tform(tform: str) -> tuple[int, str, int]:
    """Split a ``TFORMn`` value into ``(repeat, type letter, field width)``.

    Raises :class:`CatalogFormatError` for an unknown format.
    """
    match = _TFORM.match(tform.upper())
    if not match:
        raise CatalogFormatError(f"Unknown TFORM value {tform!r}")
    repeat = int(match.group(1)) if match.group(1) else 1
    letter = match.group(2)
    if letter == "X":
        width = math.ceil(repeat / 8)
    else:
        width = repeat * TFORM_WIDTHS[letter]
    return repeat, letter, width


def _parse_value(text: str) -> Any:
    text = text.strip()
    if text.startswith("'"):
        # Quoted string; '' escapes a quote and trailing blanks are insignificant
        value = []
        i = 1
        while i < len(text):
            if text[i] == "'":
                if text[i + 1 : i + 2] == "'":
                    value.append("'")
                    i += 2
                    continue
                break
            value.append(text[i])
            i += 1
        return "".join(value).rstrip()

    text = text.split("/", 1)[0].strip()
    if text == "T":
        return True
    if text == "F":
        return False
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text.replace("D", "E"))
    except ValueError:
        return text


def _header_int(header: dict[str, Any], keyword: str, default: int = 0, signed: bool = False) -> int:
    """Return an integer header value; non-integer or negative values are format errors."""
    value = header.get(keyword, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CatalogFormatError(f"Header keyword {keyword} is not an integer: {value!r}")
    if value < 0 and not signed:
        raise CatalogFormatError(f"Header keyword {keyword} is negative: {value}")
    return value


class FitsReader:
    """Reads the first binary table extension of a FITS file.

    Without ``header_only`` the data unit of the table is read into memory
    up front; a data unit shorter than ``NAXIS1 * NAXIS2`` bytes is an error.
    """

    BLOCK_SIZE = 2880
    CARD_SIZE = 80

    def __init__(self, path: Path | str, header_only: bool = False) -> None:
        self.path = Path(path)
        self.header_only = header_only
        self.header: dict[str, Any] = {}
        self._descriptors: list[ColumnDescriptor] = []
        self._data = b""

        with open(self.path, "rb") as f:
            self._read(f)

    def _read_header(self, f: BinaryIO) -> dict[str, Any] | None:
        """Read one header unit; return None at end of file."""
        header: dict[str, Any] = {}
        while True:
            block = f.read(self.BLOCK_SIZE)
            if not block:
                if header:
                    raise CatalogFormatError("Header unit has no END card")
                return None
            if len(block) < self.BLOCK_SIZE:
                raise CatalogFormatError("Truncated header block")

            for start in range(0, self.BLOCK_SIZE, self.CARD_SIZE):
                card = block[start : start + self.CARD_SIZE].decode("ascii", errors="replace")
                keyword = card[:8].strip()
                if keyword == "END":
                    return header
                if card[8:10] == "= " and keyword not in header:
                    header[keyword] = _parse_value(card[10:])

    def _data_size(self, header: dict[str, Any]) -> int:
        naxis = _header_int(header, "NAXIS")
        if not naxis:
            return 0
        elements = 1
        for axis in range(1, naxis + 1):
            elements *= _header_int(header, f"NAXIS{axis}")
        bitpix = _header_int(header, "BITPIX", 8, signed=True)
        gcount = _header_int(header, "GCOUNT", 1)
        pcount = _header_int(header, "PCOUNT")
        return abs(bitpix) * gcount * (pcount + elements) // 8

    def _padded(self, size: int) -> int:
        return -(-size // self.BLOCK_SIZE) * self.BLOCK_SIZE

    def _read(self, f: BinaryIO) -> None:
        hdu = 0
        while True:
            header = self._read_header(f)
            if header is None:
                raise CatalogFormatError("No BINTABLE extension found")
            if hdu == 0 and header.get("SIMPLE") is not True:
                raise CatalogFormatError("Not a FITS file: missing SIMPLE card")
            if header.get("XTENSION") == "BINTABLE":
                break
            logger.debug("Skipping HDU %d", hdu)
            f.seek(self._padded(self._data_size(header)), 1)
            hdu += 1

        for keyword in ("NAXIS", "NAXIS1", "NAXIS2", "PCOUNT", "GCOUNT", "TFIELDS"):
            _header_int(header, keyword)
        self.header = header
        self._descriptors = self._build_descriptors(header)
        logger.debug("%s: BINTABLE in HDU %d with %d fields", self.path, hdu, len(self._descriptors))

        if not self.header_only:
            size = self.row_width * self.header.get("NAXIS2", 0)
            self._data = f.read(size)
            if len(self._data) < size:
                raise CatalogFormatError(f"Truncated data unit: {len(self._data)} of {size} bytes")

    def _build_descriptors(self, header: dict[str, Any]) -> list[ColumnDescriptor]:
        descriptors = []
        offset = 0
        for n in range(1, header.get("TFIELDS", 0) + 1):
            tform = header.get(f"TFORM{n}")
            if not isinstance(tform, str):
                raise CatalogFormatError(f"Missing TFORM{n}")
            repeat, letter, width = parse_tform(tform)

            if letter in ("P", "Q"):
                # Variable-length array descriptor; the element type follows the letter
                inner = _TFORM.match(tform.upper()).group(3).strip()[:1]  # type: ignore[union-attr]
                declared_type = TFORM_TYPE_NAMES.get(inner, inner)
                array_size = "*"
            else:
                declared_type = TFORM_TYPE_NAMES[letter]
                array_size = str(repeat) if repeat != 1 or letter == "A" else ""

            descriptors.append(
                ColumnDescriptor(
                    name=str(header.get(f"TTYPE{n}", f"col{n}")),
                    declared_type=declared_type,
                    unit=str(header.get(f"TUNIT{n}", "")),
                    ucd=str(header.get(f"TUCD{n}", "")),
                    description=str(header.get(f"TCOMM{n}", "")),
                    array_size=array_size,
                    byte_offset=offset,
                )
            )
            offset += width

        if offset != self.row_width:
            logger.warning("Field widths add up to %d bytes but rows are %d bytes", offset, self.row_width)
        return descriptors

    @property
    def row_width(self) -> int:
        return self.header.get("NAXIS1", 0)

    def list_columns(self) -> list[ColumnDescriptor]:
        return list(self._descriptors)

    def row_count(self) -> int:
        """Return the number of rows held in memory (0 in header-only mode)."""
        if self.header_only:
            return 0
        return self.header.get("NAXIS2", 0)

    def raw_buffer(self) -> tuple[bytes, int]:
        """Return the row records and the row stride in bytes."""
        return self._data, self.row_width
