"""Catalog Tables - Columnar in-memory tables for astronomical catalogs."""

from catalog_tables.columns import (
    Column,
    DataColumn,
    DoubleColumn,
    FloatColumn,
    Int16Column,
    Int32Column,
    Int64Column,
    NumericColumn,
    TextColumn,
    UInt8Column,
)
from catalog_tables.errors import CatalogError, CatalogFormatError, FilterSyntaxError
from catalog_tables.filters import LogicalFilter, LogicalOperator, NotFilter, NumericFilter, StringFilter
from catalog_tables.indices import ComparisonMode
from catalog_tables.parsing import FilterParser
from catalog_tables.readers import FitsReader, VOTableReader, load_table
from catalog_tables.table import Table, open_table
from catalog_tables.types import ColumnDescriptor, DataType, ElementType
from catalog_tables.view import TableView

__all__ = [
    # Main API
    "load_table",
    "open_table",
    "Table",
    "TableView",
    "ComparisonMode",
    # Columns
    "Column",
    "DataColumn",
    "TextColumn",
    "NumericColumn",
    "FloatColumn",
    "DoubleColumn",
    "UInt8Column",
    "Int16Column",
    "Int32Column",
    "Int64Column",
    # Type definitions
    "ColumnDescriptor",
    "DataType",
    "ElementType",
    # Filters
    "FilterParser",
    "NumericFilter",
    "StringFilter",
    "LogicalFilter",
    "LogicalOperator",
    "NotFilter",
    # Readers
    "VOTableReader",
    "FitsReader",
    # Errors
    "CatalogError",
    "CatalogFormatError",
    "FilterSyntaxError",
]

__version__ = "0.1.0"
