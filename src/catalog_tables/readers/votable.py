"""VOTable (XML) reader handing field texts to the streaming-text protocol."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from pathlib import Path

from catalog_tables.errors import CatalogFormatError
from catalog_tables.types import ColumnDescriptor

logger = logging.getLogger(__name__)

_DATA_TAG = re.compile(rb"<(?:[\w.-]+:)?DATA[\s>]")


def _local_name(tag: str) -> str:
    """Strip an XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            yield child


def descriptor_from_field(field: ET.Element) -> ColumnDescriptor:
    """Build a column descriptor from a ``<FIELD>`` element."""
    description = field.get("description", "")
    if not description:
        description_element = _child(field, "DESCRIPTION")
        if description_element is not None and description_element.text:
            description = " ".join(description_element.text.split())
    return ColumnDescriptor(
        name=field.get("name", ""),
        declared_type=field.get("datatype", ""),
        id=field.get("ID", ""),
        unit=field.get("unit", ""),
        ucd=field.get("ucd", ""),
        description=description,
        array_size=field.get("arraysize", ""),
    )


class VOTableReader:
    """Reads the first table of a VOTable document.

    The reader supplies the column descriptors of the first
    ``VOTABLE/RESOURCE/TABLE`` element and iterates its ``TABLEDATA`` rows
    as lists of cell texts. With ``header_only`` only the start of the file
    (up to ``<DATA>``) is parsed and no rows are produced.
    """

    # Number of bytes read when only the header is wanted
    MAX_HEADER_SIZE = 64 * 1024

    def __init__(self, path: Path | str, header_only: bool = False) -> None:
        self.path = Path(path)
        self.header_only = header_only
        self._descriptors: list[ColumnDescriptor] = []
        self._expected_rows = 0
        self._table_data: ET.Element | None = None

        if header_only:
            self._read_header()
        else:
            self._read_document()

    def _read_document(self) -> None:
        try:
            root = ET.parse(self.path).getroot()
        except ET.ParseError as error:
            raise CatalogFormatError(f"{self.path}: {error}") from error

        if _local_name(root.tag) != "VOTABLE":
            raise CatalogFormatError("Missing XML element VOTABLE")
        resource = _child(root, "RESOURCE")
        if resource is None:
            raise CatalogFormatError("Missing XML element RESOURCE")
        table = _child(resource, "TABLE")
        if table is None:
            raise CatalogFormatError("Missing XML element TABLE")

        self._load_table_header(table)
        self._table_data = _child(_child(table, "DATA"), "TABLEDATA")
        if self._table_data is None:
            raise CatalogFormatError("Missing XML element TABLEDATA")

    def _read_header(self) -> None:
        with open(self.path, "rb") as f:
            header = f.read(self.MAX_HEADER_SIZE)
        match = _DATA_TAG.search(header)
        if match:
            header = header[: match.start()]

        parser = ET.XMLPullParser(events=("start", "end"))
        try:
            parser.feed(header)
            events = list(parser.read_events())
        except ET.ParseError as error:
            raise CatalogFormatError(f"{self.path}: {error}") from error

        # Walk the (unterminated) document looking for VOTABLE/RESOURCE/TABLE
        path: list[str] = []
        table: ET.Element | None = None
        for event, element in events:
            name = _local_name(element.tag)
            if event == "start":
                if not path and name != "VOTABLE":
                    raise CatalogFormatError("Missing XML element VOTABLE")
                if table is None and name == "TABLE" and path == ["VOTABLE", "RESOURCE"]:
                    table = element
                path.append(name)
            else:
                path.pop()
                if element is table:
                    break

        if table is None:
            if not events:
                raise CatalogFormatError("Missing XML element VOTABLE")
            raise CatalogFormatError("Missing XML element TABLE")
        self._load_table_header(table)

    def _load_table_header(self, table: ET.Element) -> None:
        self._descriptors = [descriptor_from_field(field) for field in _children(table, "FIELD")]
        try:
            self._expected_rows = int(table.get("nrows", "0"))
        except ValueError:
            self._expected_rows = 0
        logger.debug("%s: %d fields, %d declared rows", self.path, len(self._descriptors), self._expected_rows)

    def list_columns(self) -> list[ColumnDescriptor]:
        return list(self._descriptors)

    def expected_rows(self) -> int:
        """Return the row count announced by the ``nrows`` attribute (0 if absent)."""
        return self._expected_rows

    def rows(self) -> Iterator[list[str | None]]:
        """Yield the cell texts of every ``<TR>`` row."""
        if self._table_data is None:
            return
        for row in _children(self._table_data, "TR"):
            yield [cell.text for cell in _children(row, "TD")]
