"""Command-line driver: load a catalog, summarise it, filter, sort and print values."""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from pathlib import Path
from typing import Any

from catalog_tables.errors import FilterSyntaxError
from catalog_tables.parsing.filter_parser import FilterParser
from catalog_tables.readers import load_table
from catalog_tables.table import Table
from catalog_tables.view import TableView

logger = logging.getLogger(__name__)


def format_value(value: Any) -> str:
    """Format a column entry for display."""
    if isinstance(value, float):
        return f"{value:.7g}"
    return str(value)


def print_values(view: TableView, column_names: list[str], start: int, end: int, max_col_width: int = 40) -> None:
    """Print the requested columns of a view slice as an aligned table."""
    columns = {name: [format_value(v) for v in view.values(name, start, end)] for name in column_names}
    num_rows = max((len(values) for values in columns.values()), default=0)
    if num_rows == 0:
        print("(no results)")
        return

    col_widths = {}
    for name, values in columns.items():
        col_widths[name] = min(max([len(name)] + [len(v) for v in values]), max_col_width)

    header = " | ".join(name.ljust(col_widths[name])[: col_widths[name]] for name in column_names)
    print(header)
    print("-" * len(header))

    for row in range(num_rows):
        cells = []
        for name in column_names:
            values = columns[name]
            val = values[row] if row < len(values) else ""
            if len(val) > col_widths[name]:
                val = val[: col_widths[name] - 3] + "..."
            cells.append(val.ljust(col_widths[name]))
        print(" | ".join(cells))

    print(f"\n({num_rows} row{'s' if num_rows != 1 else ''})")


def column_mean(table: Table, name: str) -> float | None:
    """Return the mean of the finite entries of a numeric column, or None."""
    column = table.get_column(name)
    if column is None or not column.data_type.is_numeric:
        return None
    finite = [v for v in table.view().values(column) if math.isfinite(v)]
    if not finite:
        return math.nan
    return math.fsum(finite) / len(finite)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def run(args: argparse.Namespace) -> int:
    """Execute one CLI invocation; return the exit status."""
    if not args.path.exists():
        print(f"Error: File not found: {args.path}", file=sys.stderr)
        return 1

    started = time.perf_counter()
    table = load_table(args.path, header_only=args.header_only, max_workers=args.workers)
    load_ms = _elapsed_ms(started)
    if not table.is_valid:
        print(f"Error: Could not read a table from {args.path}", file=sys.stderr)
        return 1

    print(table.info(skip_unsupported=not args.all_columns))
    print(f"Loaded in {load_ms:.3f} ms")

    for name in args.columns + args.mean + ([args.sort] if args.sort else []):
        if name not in table:
            print(f"Error: Unknown column: {name}", file=sys.stderr)
            return 1

    for name in args.mean:
        mean = column_mean(table, name)
        if mean is None:
            print(f"Error: Column {name} is not numeric", file=sys.stderr)
            return 1
        print(f"Mean of {name}: {format_value(mean)}")

    view = table.view()

    if args.where:
        try:
            expression = FilterParser().parse(args.where)
        except FilterSyntaxError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        started = time.perf_counter()
        if not expression.apply(view):
            print(f"Error: Filter does not apply to this table: {args.where}", file=sys.stderr)
            return 1
        print(f"Filtered to {view.num_rows()} rows in {_elapsed_ms(started):.3f} ms")

    if args.sort:
        started = time.perf_counter()
        if not view.sort_by_column(args.sort, ascending=not args.descending):
            print(f"Error: Column {args.sort} cannot be sorted", file=sys.stderr)
            return 1
        direction = "descending" if args.descending else "ascending"
        print(f"Sorted {view.num_rows()} rows by {args.sort} ({direction}) in {_elapsed_ms(started):.3f} ms")

    if args.columns:
        print()
        print_values(view, args.columns, args.start, args.end)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Load a VOTable or FITS catalog and filter, sort and print its columns"
    )
    arg_parser.add_argument(
        "path",
        type=Path,
        help="Path to a VOTable (.xml/.vot) or FITS (.fits/.fit/.fts) file",
    )
    arg_parser.add_argument(
        "--header-only",
        action="store_true",
        help="Read the column definitions only",
    )
    arg_parser.add_argument(
        "--all-columns",
        action="store_true",
        help="List unsupported columns in the summary",
    )
    arg_parser.add_argument(
        "-w", "--where",
        type=str,
        help="Filter expression, e.g. 'RA between 10 and 300 and Name contains \"N\"'",
    )
    arg_parser.add_argument(
        "-s", "--sort",
        type=str,
        help="Column to sort the filtered rows by",
    )
    arg_parser.add_argument(
        "--descending",
        action="store_true",
        help="Sort in descending order",
    )
    arg_parser.add_argument(
        "-c", "--columns",
        nargs="+",
        default=[],
        help="Columns whose values are printed",
    )
    arg_parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="First view row to print",
    )
    arg_parser.add_argument(
        "--end",
        type=int,
        default=-1,
        help="View row to stop printing at (negative for all)",
    )
    arg_parser.add_argument(
        "--mean",
        nargs="+",
        default=[],
        help="Numeric columns whose mean is printed",
    )
    arg_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used to decode binary columns (1 disables threading)",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = arg_parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
