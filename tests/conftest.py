"""Shared fixtures: the IVOA example galaxy table and synthetic FITS files."""

import struct
from pathlib import Path

import pytest

from catalog_tables import ColumnDescriptor, Table

DATA_DIR = Path(__file__).parent / "data"

GALAXY_DESCRIPTORS = [
    ColumnDescriptor(name="RA", declared_type="float", id="col1", unit="deg"),
    ColumnDescriptor(name="Dec", declared_type="float", id="col2", unit="deg"),
    ColumnDescriptor(name="Name", declared_type="char", id="col3", array_size="8*"),
    ColumnDescriptor(name="RVel", declared_type="int", id="col4", unit="km/s"),
    ColumnDescriptor(name="e_RVel", declared_type="short", id="col5", unit="km/s"),
    ColumnDescriptor(name="R", declared_type="float", id="col6", unit="Mpc"),
]

GALAXY_ROWS = [
    ["010.68", "+41.27", "N 224", "-297", "5", "0.7"],
    ["287.43", "-63.85", "N 6744", "838", "6", "10.4"],
    ["023.48", "+30.66", "N 598", "-182", "3", "0.7"],
]

# (RA, Dec, Name, RVel, e_RVel, R) packed as TFORM E, E, 8A, J, I, E
GALAXY_FITS_FIELDS = [
    ("RA", "E", "deg"),
    ("Dec", "E", "deg"),
    ("Name", "8A", ""),
    ("RVel", "J", "km/s"),
    ("e_RVel", "I", "km/s"),
    ("R", "E", "Mpc"),
]
GALAXY_RECORD = struct.Struct(">ff8sihf")


def fits_card(keyword: str, value=None) -> bytes:
    """Render one 80-character FITS header card."""
    if value is None:
        card = keyword
    elif isinstance(value, bool):
        card = f"{keyword:<8}= {'T' if value else 'F':>20}"
    elif isinstance(value, str):
        card = f"{keyword:<8}= '{value:<8}'"
    else:
        card = f"{keyword:<8}= {value:>20}"
    return card.ljust(80).encode("ascii")


def fits_unit(cards: list[bytes], data: bytes = b"") -> bytes:
    """Join header cards and a data unit, padding both to 2880-byte blocks."""
    header = b"".join(cards) + fits_card("END")
    header += b" " * (-len(header) % 2880)
    return header + data + b"\x00" * (-len(data) % 2880)


def build_fits(fields, records: bytes, num_rows: int, row_width: int, primary_data: bytes = b"") -> bytes:
    """Build a FITS file holding one binary table extension.

    ``fields`` is a list of ``(TTYPE, TFORM, TUNIT)`` triples. A non-empty
    ``primary_data`` is stored as a 16-bit image in the primary HDU.
    """
    primary = [fits_card("SIMPLE", True), fits_card("BITPIX", 16 if primary_data else 8)]
    if primary_data:
        primary += [fits_card("NAXIS", 1), fits_card("NAXIS1", len(primary_data) // 2)]
    else:
        primary += [fits_card("NAXIS", 0)]
    primary.append(fits_card("EXTEND", True))

    extension = [
        fits_card("XTENSION", "BINTABLE"),
        fits_card("BITPIX", 8),
        fits_card("NAXIS", 2),
        fits_card("NAXIS1", row_width),
        fits_card("NAXIS2", num_rows),
        fits_card("PCOUNT", 0),
        fits_card("GCOUNT", 1),
        fits_card("TFIELDS", len(fields)),
    ]
    for n, (name, tform, unit) in enumerate(fields, start=1):
        extension.append(fits_card(f"TTYPE{n}", name))
        extension.append(fits_card(f"TFORM{n}", tform))
        if unit:
            extension.append(fits_card(f"TUNIT{n}", unit))

    return fits_unit(primary, primary_data) + fits_unit(extension, records)


def galaxy_records() -> bytes:
    return b"".join(
        [
            GALAXY_RECORD.pack(10.68, 41.27, b"N 224", -297, 5, 0.7),
            GALAXY_RECORD.pack(287.43, -63.85, b"N 6744", 838, 6, 10.4),
            GALAXY_RECORD.pack(23.48, 30.66, b"N 598", -182, 3, 0.7),
        ]
    )


@pytest.fixture
def galaxies():
    """The three-row IVOA example table built from field texts."""
    return Table.from_rows(GALAXY_DESCRIPTORS, GALAXY_ROWS)


@pytest.fixture
def galaxy_fits(tmp_path):
    """The IVOA example table stored as a FITS binary table."""
    path = tmp_path / "galaxies.fits"
    path.write_bytes(build_fits(GALAXY_FITS_FIELDS, galaxy_records(), 3, GALAXY_RECORD.size))
    return path


@pytest.fixture
def array_types_fits(tmp_path):
    """A FITS table mixing scalar integer columns with an array column."""
    record = struct.Struct(">i3fi")
    records = b"".join(record.pack(s1, s1 * 0.5, s1 * 1.5, s1 * 2.5, s1 * 2) for s1 in (1, 2, 3))
    fields = [("Scalar1", "J", ""), ("Array", "3E", ""), ("Scalar2", "J", "")]
    path = tmp_path / "array_types.fits"
    path.write_bytes(build_fits(fields, records, 3, record.size))
    return path
