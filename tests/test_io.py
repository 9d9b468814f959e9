"""Tests for isostitch.io module."""

import json
import math

import pytest

from isostitch.errors import IntegrityError
from isostitch.grid import GridField
from isostitch.io import read_tidy_csv, validate_records, write_json
from isostitch.pipeline import ContourResult, IsolineEntry
from isostitch.runs import Point


class TestReadTidyCsv:
    """Tests for read_tidy_csv function."""

    def test_any_column_order(self, tmp_path):
        """Should match headers case insensitively in any order."""
        path = tmp_path / 'survivors.csv'
        path.write_text('Survivors,AGE,Year,country\n10,0,2000,se\n8,1,2000,se\n12,0,2001,se\n9,1,2001,se\n')
        rows = read_tidy_csv(str(path))
        assert rows[0] == (2000., 0., 10.)
        field = GridField.from_rows(rows)
        assert field.valid
        assert field.value(1, 1) == 9.

    def test_skips_non_finite_rows(self, tmp_path):
        """Should skip rows with an empty or non-numeric cell."""
        path = tmp_path / 'survivors.csv'
        path.write_text('year,age,survivors\n2000,0,10\n2000,1,\n2001,0,n/a\n2001,1,7\n')
        assert read_tidy_csv(str(path)) == [(2000., 0., 10.), (2001., 1., 7.)]

    def test_quoted_delimiter(self, tmp_path):
        """Should not split a quoted cell on the delimiter."""
        path = tmp_path / 'survivors.csv'
        path.write_text('country,year,age,survivors\n"Sweden, north",2000,0,10\n"Sweden, south","2001",1,"7"\n')
        assert read_tidy_csv(str(path)) == [(2000., 0., 10.), (2001., 1., 7.)]

    def test_missing_header(self, tmp_path):
        """Should reject a file without a survivors column."""
        path = tmp_path / 'survivors.csv'
        path.write_text('year,age,count\n2000,0,10\n')
        with pytest.raises(ValueError, match='survivors'):
            read_tidy_csv(str(path))

    def test_missing_file(self, tmp_path):
        """Should reject a path that does not exist."""
        with pytest.raises(ValueError):
            read_tidy_csv(str(tmp_path / 'missing.csv'))


class TestWriteJson:
    """Tests for write_json and validate_records."""

    def test_writes_records(self, tmp_path):
        """Should write the records of a result as JSON."""
        result = ContourResult([IsolineEntry(1e6, (Point(2000., 1.), Point(2001., 2.)))])
        path = tmp_path / 'isolines.json'
        write_json(result, str(path))
        with open(path) as f:
            data = json.load(f)
        assert data == [{'level': 1e6, 'points': [{'year': 2000., 'age': 1.}, {'year': 2001., 'age': 2.}]}]

    def test_non_finite_not_written(self, tmp_path):
        """Should raise before writing a non-finite coordinate."""
        records = [{'level': 1e6, 'points': [{'year': math.inf, 'age': 1.}, {'year': 2001., 'age': 2.}]}]
        path = tmp_path / 'isolines.json'
        with pytest.raises(IntegrityError):
            write_json(records, str(path))
        assert not path.exists()

    def test_validate_records_passes_through(self):
        """Should return valid records unchanged."""
        records = [{'level': 1., 'points': [{'year': 1., 'age': 2.}]}]
        assert validate_records(records) is records

    def test_validate_records_level(self):
        """Should reject a non-finite level."""
        with pytest.raises(IntegrityError):
            validate_records([{'level': math.nan, 'points': []}])
