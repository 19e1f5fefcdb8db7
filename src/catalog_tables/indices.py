"""Index-list algebra shared by table views and filter expressions.

An index list is a plain ``list[int]`` of row positions without
duplicates. Lists produced by filtering, inversion, union and
intersection are strictly increasing (*ordered*); lists produced by
value sorting are arbitrary permutations (*unordered*). ``None`` in place
of a candidate list stands for every row of the table, in row order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

IndexList = list[int]


class ComparisonMode(Enum):
    """Comparison applied by a numeric filter."""

    EQUAL = "="
    NOT_EQUAL = "!="
    GREATER_OR_EQUAL = ">="
    LESSER_OR_EQUAL = "<="
    RANGE_INCLUSIVE = "between"


def comparison(mode: ComparisonMode, lo: Any, hi: Any = None) -> Callable[[Any], bool]:
    """Return a predicate testing one entry against the given thresholds."""
    if mode == ComparisonMode.EQUAL:
        return lambda value: value == lo
    if mode == ComparisonMode.NOT_EQUAL:
        return lambda value: value != lo
    if mode == ComparisonMode.GREATER_OR_EQUAL:
        return lambda value: value >= lo
    if mode == ComparisonMode.LESSER_OR_EQUAL:
        return lambda value: value <= lo
    if mode == ComparisonMode.RANGE_INCLUSIVE:
        return lambda value: lo <= value <= hi
    raise ValueError(f"Unknown comparison mode: {mode}")


def identity(num_rows: int) -> IndexList:
    """Return the ordered list of every row index."""
    return list(range(num_rows))


def select(
    entries: Sequence[Any],
    candidates: IndexList | None,
    predicate: Callable[[Any], bool],
) -> IndexList:
    """Return the candidate rows whose entry satisfies ``predicate``.

    The result keeps the order of ``candidates`` (row order when
    ``candidates`` is None). Candidates outside ``entries`` are skipped.
    """
    if candidates is None:
        return [i for i, value in enumerate(entries) if predicate(value)]
    num_entries = len(entries)
    return [i for i in candidates if 0 <= i < num_entries and predicate(entries[i])]


def filter_numeric(
    entries: Sequence[Any],
    candidates: IndexList | None,
    mode: ComparisonMode,
    lo: Any,
    hi: Any = None,
) -> IndexList:
    return select(entries, candidates, comparison(mode, lo, hi))


def filter_substring(
    entries: Sequence[str],
    candidates: IndexList | None,
    needle: str,
    case_insensitive: bool = False,
) -> IndexList:
    """Return the candidate rows whose text entry contains ``needle``."""
    if case_insensitive:
        folded = needle.casefold()
        return select(entries, candidates, lambda value: folded in value.casefold())
    return select(entries, candidates, lambda value: needle in value)


def sort_indices(entries: Sequence[Any], indices: IndexList, ascending: bool = True) -> None:
    """Reorder ``indices`` in place by the entries they point at.

    The sort is stable. NaN entries compare unordered, so they are moved
    behind every other entry whatever the direction.
    """
    # NaN is the only value not equal to itself
    keyed = [i for i in indices if entries[i] == entries[i]]
    missing = [i for i in indices if entries[i] != entries[i]]
    keyed.sort(key=entries.__getitem__, reverse=not ascending)
    indices[:] = keyed + missing


def invert_indices(indices: IndexList, num_rows: int) -> IndexList:
    """Return the rows of ``range(num_rows)`` absent from the ordered ``indices``."""
    inverted: IndexList = []
    position = 0
    count = len(indices)
    for row in range(num_rows):
        if position < count and indices[position] == row:
            position += 1
        else:
            inverted.append(row)
    return inverted


def union_indices(first: IndexList, second: IndexList) -> IndexList:
    """Merge two ordered index lists into their ordered union."""
    merged: IndexList = []
    i = j = 0
    while i < len(first) and j < len(second):
        a, b = first[i], second[j]
        if a < b:
            merged.append(a)
            i += 1
        elif b < a:
            merged.append(b)
            j += 1
        else:
            merged.append(a)
            i += 1
            j += 1
    merged.extend(first[i:])
    merged.extend(second[j:])
    return merged


def intersect_indices(first: IndexList, second: IndexList) -> IndexList:
    """Return the ordered intersection of two ordered index lists."""
    common: IndexList = []
    i = j = 0
    while i < len(first) and j < len(second):
        a, b = first[i], second[j]
        if a < b:
            i += 1
        elif b < a:
            j += 1
        else:
            common.append(a)
            i += 1
            j += 1
    return common


def slice_bounds(length: int, start: int = 0, end: int = -1) -> tuple[int, int]:
    """Clamp a ``[start, end)`` request into a sequence of ``length`` items.

    A negative ``end`` means "up to the last item".
    """
    begin = min(max(start, 0), length)
    if end < 0:
        return begin, length
    return begin, min(max(end, begin), length)
