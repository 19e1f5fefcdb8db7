"""Catalog file readers and the format-dispatching loader."""

from __future__ import annotations

import logging
from pathlib import Path

from catalog_tables.errors import CatalogError
from catalog_tables.readers.fits import FitsReader
from catalog_tables.readers.votable import VOTableReader
from catalog_tables.table import Table, open_table

logger = logging.getLogger(__name__)

__all__ = [
    "FITS_SUFFIXES",
    "FitsReader",
    "VOTableReader",
    "load_table",
]

FITS_SUFFIXES = (".fits", ".fit", ".fts")


def load_table(path: Path | str, header_only: bool = False, max_workers: int | None = None) -> Table:
    """Read a VOTable or FITS catalog into a table.

    The format follows the file suffix: FITS for ``.fits``, ``.fit`` and
    ``.fts``, VOTable otherwise. With ``header_only`` the table has its
    columns but no rows. A file that cannot be read yields an invalid
    table; the reason is logged.
    """
    path = Path(path)
    try:
        reader: FitsReader | VOTableReader
        if path.suffix.lower() in FITS_SUFFIXES:
            reader = FitsReader(path, header_only=header_only)
        else:
            reader = VOTableReader(path, header_only=header_only)
    except (CatalogError, OSError) as error:
        logger.error("Could not read %s: %s", path, error)
        return Table()

    table = open_table(reader.list_columns(), None if header_only else reader, max_workers=max_workers)
    if isinstance(reader, VOTableReader) and table.is_valid and not header_only:
        declared = reader.expected_rows()
        if declared and declared != table.num_rows:
            logger.warning("%s declares %d rows but holds %d", path, declared, table.num_rows)

    logger.info("Loaded %s: %d rows, %d columns", path.name, table.num_rows, table.num_columns)
    return table
