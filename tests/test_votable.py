"""Tests for reading VOTable files."""

import math

import pytest

from catalog_tables import load_table
from catalog_tables.errors import CatalogFormatError
from catalog_tables.readers.votable import VOTableReader
from conftest import DATA_DIR


class TestVOTableReader:
    """Tests for the VOTable reader itself."""

    def test_list_columns(self):
        reader = VOTableReader(DATA_DIR / "ivoa_example.xml")
        columns = reader.list_columns()

        assert [c.name for c in columns] == ["RA", "Dec", "Name", "RVel", "e_RVel", "R"]
        assert [c.id for c in columns] == ["col1", "col2", "col3", "col4", "col5", "col6"]
        assert [c.declared_type for c in columns] == ["float", "float", "char", "int", "short", "float"]
        assert columns[0].unit == "deg"
        assert columns[0].ucd == "pos.eq.ra;meta.main"
        assert columns[2].array_size == "8*"
        assert columns[5].description == "Distance of Galaxy, assuming H=75km/s/Mpc"

    def test_expected_rows(self):
        assert VOTableReader(DATA_DIR / "ivoa_example.xml").expected_rows() == 3
        assert VOTableReader(DATA_DIR / "empty_data.xml").expected_rows() == 0

    def test_rows(self):
        rows = list(VOTableReader(DATA_DIR / "ivoa_example.xml").rows())

        assert len(rows) == 3
        assert rows[1] == ["287.43", "-63.85", "N 6744", "838", "6", "10.4"]

    def test_description_attribute(self):
        columns = VOTableReader(DATA_DIR / "mixed_types.xml").list_columns()
        assert columns[3].description == "Apparent magnitude"

    def test_header_only(self):
        """Test that header-only reading finds the fields but no rows."""
        reader = VOTableReader(DATA_DIR / "ivoa_example.xml", header_only=True)

        assert len(reader.list_columns()) == 6
        assert reader.expected_rows() == 3
        assert list(reader.rows()) == []

    def test_header_only_limit(self, tmp_path, monkeypatch):
        """Test that only the first MAX_HEADER_SIZE bytes are parsed."""
        text = (DATA_DIR / "ivoa_example.xml").read_text()
        cut = text.index('<FIELD name="Name"')
        monkeypatch.setattr(VOTableReader, "MAX_HEADER_SIZE", cut)
        path = tmp_path / "big.xml"
        path.write_text(text)

        assert [c.name for c in VOTableReader(path, header_only=True).list_columns()] == ["RA", "Dec"]

    @pytest.mark.parametrize("name", ["no_resource.xml", "no_table.xml", "no_data.xml"])
    def test_missing_elements(self, name):
        with pytest.raises(CatalogFormatError):
            VOTableReader(DATA_DIR / name)

    def test_malformed_xml(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<VOTABLE><RESOURCE><TABLE></RESOURCE>")

        with pytest.raises(CatalogFormatError):
            VOTableReader(path)

    def test_not_a_votable(self, tmp_path):
        path = tmp_path / "other.xml"
        path.write_text("<html><body/></html>")

        with pytest.raises(CatalogFormatError):
            VOTableReader(path)
        with pytest.raises(CatalogFormatError):
            VOTableReader(path, header_only=True)


class TestLoadVOTable:
    """Tests for loading VOTable files into tables."""

    def test_ivoa_example(self):
        table = load_table(DATA_DIR / "ivoa_example.xml")

        assert table.is_valid
        assert table.num_rows == 3
        assert table.num_columns == 6
        assert [c.data_type_size for c in table] == [4, 4, 1, 4, 2, 4]
        assert table.view().values("RA") == pytest.approx([10.68, 287.43, 23.48], rel=1e-6)
        assert table.view().values("Dec") == pytest.approx([41.27, -63.85, 30.66], rel=1e-6)
        assert table.view().values("Name") == ["N 224", "N 6744", "N 598"]
        assert table.view().values("RVel") == [-297, 838, -182]
        assert table.view().values("e_RVel") == [5, 6, 3]
        assert table.view().values("R") == pytest.approx([0.7, 10.4, 0.7], rel=1e-6)

    def test_lookup_by_id(self):
        table = load_table(DATA_DIR / "ivoa_example.xml")
        assert table.get_column("col3").name == "Name"

    @pytest.mark.parametrize("name", ["no_resource.xml", "no_table.xml", "no_data.xml", "too_many_fields.xml"])
    def test_invalid_files(self, name):
        assert not load_table(DATA_DIR / name).is_valid

    def test_missing_file(self, tmp_path):
        assert not load_table(tmp_path / "missing.xml").is_valid

    def test_empty_data(self):
        table = load_table(DATA_DIR / "empty_data.xml")

        assert table.is_valid
        assert table.num_rows == 0
        assert table.num_columns == 2

    def test_header_only(self):
        table = load_table(DATA_DIR / "ivoa_example.xml", header_only=True)

        assert table.is_valid
        assert table.num_rows == 0
        assert table.num_columns == 6

    def test_header_only_without_data(self):
        table = load_table(DATA_DIR / "no_data.xml", header_only=True)

        assert table.is_valid
        assert table.num_columns == 2

    def test_mixed_types(self):
        """Test unsupported fields, hex values, blanks and short rows."""
        table = load_table(DATA_DIR / "mixed_types.xml")

        assert table.num_rows == 3
        assert [c.is_supported for c in table] == [True, False, False, True, True]
        view = table.view()
        assert view.values("id") == [1, 16, 3]
        mags = view.values("mag")
        assert mags[0] == 12.5
        assert math.isnan(mags[1])
        assert math.isnan(mags[2])
        assert view.values("quality") == [7, 255, 0]
