"""Tests for table views: filtering, sorting, set algebra and extraction."""

import math

import pytest

from catalog_tables import ColumnDescriptor, ComparisonMode, Table
from catalog_tables.columns import FloatColumn, Int32Column, TextColumn
from catalog_tables.types import ElementType


def approx_list(values):
    return pytest.approx(values, rel=1e-6)


class TestNumericFilter:
    """Tests for numeric filtering on the IVOA example table."""

    @pytest.mark.parametrize(
        "lo, hi, expected",
        [
            (10, 300, 3),
            (11, 300, 2),
            (11, 14, 0),
        ],
    )
    def test_range_inclusive(self, galaxies, lo, hi, expected):
        view = galaxies.view()
        assert view.numeric_filter("RA", ComparisonMode.RANGE_INCLUSIVE, lo, hi)
        assert view.num_rows() == expected

    @pytest.mark.parametrize("threshold, expected", [(10, 3), (11, 2), (300, 0)])
    def test_greater_or_equal(self, galaxies, threshold, expected):
        view = galaxies.view()
        assert view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, threshold)
        assert view.num_rows() == expected

    @pytest.mark.parametrize("threshold, expected", [(300, 3), (11, 1), (10, 0)])
    def test_lesser_or_equal(self, galaxies, threshold, expected):
        view = galaxies.view()
        assert view.numeric_filter("RA", ComparisonMode.LESSER_OR_EQUAL, threshold)
        assert view.num_rows() == expected

    def test_equal_on_float32(self, galaxies):
        view = galaxies.view()
        assert view.numeric_filter("RA", ComparisonMode.EQUAL, 287.43)
        assert view.indices() == [1]

    def test_not_equal(self, galaxies):
        view = galaxies.view()
        assert view.numeric_filter("col1", ComparisonMode.NOT_EQUAL, 287.43)
        assert view.indices() == [0, 2]

    def test_equal_on_short(self, galaxies):
        view = galaxies.view()
        assert view.numeric_filter("e_RVel", ComparisonMode.EQUAL, 3)
        assert view.indices() == [2]

    def test_successive_filters_narrow(self, galaxies):
        view = galaxies.view()
        assert view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 11)
        assert view.numeric_filter("RVel", ComparisonMode.LESSER_OR_EQUAL, 0)
        assert view.indices() == [2]

    def test_filter_is_idempotent(self, galaxies):
        view = galaxies.view()
        view.numeric_filter("RA", ComparisonMode.RANGE_INCLUSIVE, 11, 300)
        first = view.indices()
        view.numeric_filter("RA", ComparisonMode.RANGE_INCLUSIVE, 11, 300)
        assert view.indices() == first

    def test_every_row_matching_gives_full_view(self, galaxies):
        view = galaxies.view()
        assert view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 10)
        assert not view.is_subset

    def test_text_column_fails(self, galaxies):
        """Test that a numeric filter on a text column changes nothing."""
        view = galaxies.view()
        view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 11)
        assert not view.numeric_filter("Name", ComparisonMode.GREATER_OR_EQUAL, 1)
        assert view.num_rows() == 2

    def test_missing_column_fails(self, galaxies):
        view = galaxies.view()
        assert not view.numeric_filter("Vmag", ComparisonMode.EQUAL, 1)
        assert not view.numeric_filter(None, ComparisonMode.EQUAL, 1)
        assert not view.numeric_filter(42, ComparisonMode.EQUAL, 1)
        assert not view.numeric_filter(True, ComparisonMode.EQUAL, 1)
        assert view.num_rows() == 3

    def test_column_object_and_position(self, galaxies):
        view = galaxies.view()
        assert view.numeric_filter(galaxies["RVel"], ComparisonMode.GREATER_OR_EQUAL, 0)
        assert view.indices() == [1]
        view.reset()
        assert view.numeric_filter(3, ComparisonMode.GREATER_OR_EQUAL, 0)
        assert view.indices() == [1]

    def test_column_of_another_table_fails(self, galaxies):
        other = Table([ColumnDescriptor("RA", "float")])
        view = galaxies.view()
        assert not view.numeric_filter(other["RA"], ComparisonMode.EQUAL, 1)


class TestStringFilter:
    """Tests for substring filtering."""

    def test_case_sensitive(self, galaxies):
        view = galaxies.view()
        assert view.string_filter("Name", "N 224")
        assert view.indices() == [0]

    def test_case_insensitive(self, galaxies):
        view = galaxies.view()
        assert view.string_filter("Name", "n 224", case_insensitive=True)
        assert view.indices() == [0]

    def test_case_mismatch(self, galaxies):
        view = galaxies.view()
        assert view.string_filter("Name", "n 224")
        assert view.num_rows() == 0

    def test_numeric_column_fails(self, galaxies):
        view = galaxies.view()
        assert not view.string_filter("RA", "10")
        assert view.num_rows() == 3


class TestSorting:
    """Tests for value and index sorting."""

    def test_ascending_first_value(self, galaxies):
        view = galaxies.view()
        assert view.sort_by_column("RA", ascending=True)
        assert view.values("RA", 0, 1) == approx_list([10.68])

    def test_descending_first_value(self, galaxies):
        view = galaxies.view()
        assert view.sort_by_column("RA", ascending=False)
        assert view.values("RA", 0, 1) == approx_list([287.43])

    def test_sorted_values_are_monotonic(self, galaxies):
        view = galaxies.view()
        view.sort_by_column("RVel")
        values = view.values("RVel")
        assert values == sorted(values)
        view.sort_by_column("RVel", ascending=False)
        values = view.values("RVel")
        assert values == sorted(values, reverse=True)

    def test_text_sort(self, galaxies):
        view = galaxies.view()
        assert view.sort_by_column("Name")
        assert view.values("Name") == ["N 224", "N 598", "N 6744"]

    def test_sorted_view_is_unordered(self, galaxies):
        view = galaxies.view()
        view.sort_by_column("RA")
        assert view.is_subset
        assert not view.ordered

    def test_filter_keeps_sort_order(self, galaxies):
        """Test that filtering a sorted view keeps its order."""
        view = galaxies.view()
        view.sort_by_column("RA", ascending=False)
        assert view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 11)
        assert view.values("RA") == approx_list([287.43, 23.48])
        assert not view.ordered

    def test_sort_by_index_restores_row_order(self, galaxies):
        view = galaxies.view()
        view.sort_by_column("RA", ascending=False)
        assert view.sort_by_index()
        assert view.ordered
        assert view.indices() == [0, 1, 2]

    def test_nan_sorts_last(self):
        table = Table.from_rows([ColumnDescriptor("mag", "double")], [["3"], [""], ["1"]])
        view = table.view()
        view.sort_by_column("mag")
        values = view.values("mag")
        assert values[:2] == [1.0, 3.0]
        assert math.isnan(values[2])
        view.sort_by_column("mag", ascending=False)
        values = view.values("mag")
        assert values[:2] == [3.0, 1.0]
        assert math.isnan(values[2])

    def test_unsupported_column_fails(self):
        table = Table.from_rows([ColumnDescriptor("a", "int"), ColumnDescriptor("b", "boolean")], [["1", "T"]])
        view = table.view()
        assert not view.sort_by_column("b")
        assert not view.is_subset


class TestSetAlgebra:
    """Tests for invert, combine and intersect."""

    def test_invert(self, galaxies):
        view = galaxies.view()
        view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 100)
        assert view.invert()
        assert view.indices() == [0, 2]

    def test_invert_twice_restores(self, galaxies):
        view = galaxies.view()
        view.string_filter("Name", "N 6")
        before = view.indices()
        assert view.invert()
        assert view.invert()
        assert view.indices() == before

    def test_invert_full_and_empty(self, galaxies):
        view = galaxies.view()
        assert view.invert()
        assert view.num_rows() == 0
        assert view.invert()
        assert not view.is_subset
        assert view.num_rows() == 3

    def test_invert_unordered_fails(self, galaxies):
        view = galaxies.view()
        view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 11)
        view.sort_by_column("RA", ascending=False)
        before = view.indices()
        assert not view.invert()
        assert view.indices() == before

    def test_combine_with_inverse_is_full(self, galaxies):
        view = galaxies.view()
        view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 100)
        inverse = view.copy()
        inverse.invert()
        assert view.combine(inverse)
        assert not view.is_subset

    def test_combine_is_union(self, galaxies):
        first = galaxies.view()
        first.numeric_filter("RA", ComparisonMode.LESSER_OR_EQUAL, 11)
        second = galaxies.view()
        second.numeric_filter("e_RVel", ComparisonMode.EQUAL, 3)
        assert first.combine(second)
        assert first.indices() == [0, 2]

    def test_combine_unordered_fails(self, galaxies):
        first = galaxies.view()
        first.numeric_filter("RA", ComparisonMode.LESSER_OR_EQUAL, 100)
        second = galaxies.view()
        second.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 100)
        second.sort_by_column("RA")
        assert not first.combine(second)
        assert first.indices() == [0, 2]

    def test_combine_other_table_fails(self, galaxies):
        other = Table.from_rows([ColumnDescriptor("a", "int")], [["1"]])
        assert not galaxies.view().combine(other.view())

    def test_intersect(self, galaxies):
        first = galaxies.view()
        first.numeric_filter("RA", ComparisonMode.LESSER_OR_EQUAL, 100)
        second = galaxies.view()
        second.numeric_filter("e_RVel", ComparisonMode.LESSER_OR_EQUAL, 3)
        assert first.intersect(second)
        assert first.indices() == [2]

    def test_intersect_with_full(self, galaxies):
        first = galaxies.view()
        second = galaxies.view()
        second.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 100)
        assert first.intersect(second)
        assert first.indices() == [1]
        assert first.intersect(galaxies.view())
        assert first.indices() == [1]

    def test_copy_is_independent(self, galaxies):
        view = galaxies.view()
        copy = view.copy()
        copy.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 100)
        assert view.num_rows() == 3
        assert copy.num_rows() == 1


class TestValues:
    """Tests for extracting entries in view order."""

    def test_round_trip(self, galaxies):
        view = galaxies.view()
        assert view.values("RVel", 0, view.num_rows()) == list(galaxies["RVel"].entries)
        assert view.values("Name") == ["N 224", "N 6744", "N 598"]

    def test_slice_of_subset(self, galaxies):
        view = galaxies.view()
        view.numeric_filter("RA", ComparisonMode.GREATER_OR_EQUAL, 11)
        assert view.values("RVel") == [838, -182]
        assert view.values("RVel", 1) == [-182]
        assert view.values("RVel", 0, 1) == [838]
        assert view.values("RVel", 5) == []

    def test_as_type(self, galaxies):
        view = galaxies.view()
        assert view.values("RVel", as_type=Int32Column) == [-297, 838, -182]
        assert view.values("RVel", as_type=ElementType.INT32) == [-297, 838, -182]
        assert view.values("RA", as_type=FloatColumn) == approx_list([10.68, 287.43, 23.48])

    def test_as_type_mismatch(self, galaxies):
        view = galaxies.view()
        assert view.values("RA", as_type=Int32Column) == []
        assert view.values("RA", as_type=ElementType.FLOAT64) == []
        assert view.values("RVel", as_type=TextColumn) == []

    def test_unsupported_and_missing(self):
        table = Table.from_rows([ColumnDescriptor("a", "int"), ColumnDescriptor("b", "boolean")], [["1", "T"]])
        view = table.view()
        assert view.values("b") == []
        assert view.values("zzz") == []
        assert view.values(None) == []
