"""Exception types raised by catalog readers and the filter language.

Table and view operations never raise for data-shape problems; they
report failure through their return values. Exceptions are reserved
for collaborators that cannot produce a table at all.
"""

from __future__ import annotations

__all__ = [
    "CatalogError",
    "CatalogFormatError",
    "FilterSyntaxError",
]


class CatalogError(Exception):
    """Base class for failures while reading a catalog."""


class CatalogFormatError(CatalogError, ValueError):
    """The catalog file is missing required elements or is truncated."""


class FilterSyntaxError(SyntaxError):
    """A filter expression could not be tokenized or parsed."""
