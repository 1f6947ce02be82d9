"""Tests for DataFrame and CSV row sources."""

import numpy as np
import pandas as pd
import pytest

from afdclean import (
    CleanerConfig,
    CsvRowSource,
    DataFrameRowSource,
    DataSourceError,
    RowSource,
    discover_dependencies,
    run,
)
from afdclean.source import normalize_value


@pytest.fixture
def csv_path(tmp_path, noisy_df):
    path = tmp_path / "cities.csv"
    noisy_df.to_csv(path, index=False)
    return path


class TestNormalizeValue:
    """Test cell normalization."""

    @pytest.mark.parametrize("missing", [None, np.nan, pd.NA, pd.NaT, float("nan")])
    def test_missing_markers(self, missing):
        assert normalize_value(missing) is None

    def test_numpy_scalars(self):
        value = normalize_value(np.int64(3))
        assert value == 3
        assert type(value) is int

    def test_plain_values_unchanged(self):
        assert normalize_value("x") == "x"
        assert normalize_value((1, 2)) == (1, 2)

    def test_containers_become_hashable(self):
        assert normalize_value([1, np.int64(2)]) == (1, 2)
        assert normalize_value(np.array([3, 4])) == (3, 4)
        assert normalize_value({"a", "b"}) == frozenset({"a", "b"})

    def test_unhashable_cell(self):
        with pytest.raises(DataSourceError):
            normalize_value({"k": 1})

    def test_list_cells_group_by_content(self):
        df = pd.DataFrame({"tags": [["a"], ["a"], ["b"], ["b"]], "n": [1, 1, 2, 2]})
        result = discover_dependencies(df, epsilon=0)

        assert set(result.keys()) == {"n->tags", "tags->n"}


class TestDataFrameRowSource:
    """Test the in-memory source."""

    def test_protocol(self, scenario_source):
        assert isinstance(scenario_source, RowSource)

    def test_rows_and_windows(self, scenario_source):
        assert scenario_source.columns == ["A", "B", "C"]
        assert scenario_source.row_count() == 5
        assert list(scenario_source.rows())[0] == (1, 1, 1)
        assert list(scenario_source.rows(1, 2)) == [(1, 1, 2), (2, 2, 1)]
        assert list(scenario_source.rows(4)) == [(3, 3, 3)]
        assert list(scenario_source.rows(2, 0)) == []

    def test_column_subset_and_order(self, scenario_df):
        source = DataFrameRowSource(scenario_df, ["C", "A"])
        assert list(source.rows(0, 2)) == [(1, 1), (2, 1)]

    def test_missing_values_share_a_class(self):
        df = pd.DataFrame({"A": [1.0, np.nan, np.nan, 2.0], "B": [1, 2, 2, 3]})
        result = discover_dependencies(df, epsilon=0)

        assert list(DataFrameRowSource(df).rows(1, 1)) == [(None, 2)]
        assert set(result.keys()) == {"B->A", "A->B"}

    def test_non_string_column_names(self):
        df = pd.DataFrame({0: [1, 2], 1: [3, 4]})
        assert DataFrameRowSource(df).columns == ["0", "1"]

    def test_errors(self, scenario_df):
        with pytest.raises(DataSourceError):
            DataFrameRowSource(scenario_df, ["A", "Z"])
        with pytest.raises(DataSourceError):
            DataFrameRowSource([[1, 2]])
        with pytest.raises(ValueError):
            list(DataFrameRowSource(scenario_df).rows(-1))


class TestCsvRowSource:
    """Test the streaming CSV source."""

    def test_header_and_count(self, csv_path):
        source = CsvRowSource(csv_path)

        assert source.columns == ["city", "country", "zip"]
        assert source.row_count() == 10

    @pytest.mark.parametrize("read_chunksize", [1, 3, 100])
    def test_windows(self, csv_path, read_chunksize):
        source = CsvRowSource(csv_path, ["city", "zip"], read_chunksize=read_chunksize)

        assert list(source.rows(8, 2)) == [("Paris", "75"), ("Rome", "10")]
        assert len(list(source.rows())) == 10
        assert list(source.rows(3, 0)) == []

    def test_missing_cells(self, tmp_path):
        path = tmp_path / "gaps.csv"
        path.write_text("A,B\nx,1\n,2\n,3\n", encoding="utf-8")

        assert list(CsvRowSource(path).rows()) == [("x", "1"), (None, "2"), (None, "3")]

    def test_read_csv_options(self, tmp_path):
        path = tmp_path / "semi.csv"
        path.write_text("A;B\n1;2\n", encoding="utf-8")

        assert list(CsvRowSource(path, sep=";").rows()) == [("1", "2")]

    def test_same_result_as_dataframe(self, csv_path, noisy_df):
        config = CleanerConfig(["city", "country", "zip"], epsilon=0.1)

        from_csv = run(CsvRowSource(csv_path, read_chunksize=4), config)
        from_frame = run(DataFrameRowSource(noisy_df), config)

        assert from_csv.as_dict() == from_frame.as_dict()

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError):
            CsvRowSource(tmp_path / "nope.csv")

    def test_missing_column(self, csv_path):
        with pytest.raises(DataSourceError):
            CsvRowSource(csv_path, ["city", "population"])

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(DataSourceError):
            CsvRowSource(path)

    def test_undecodable_bytes(self, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_bytes(b"A,B\n1,\xff\xfe\n2,x\n")

        with pytest.raises(DataSourceError):
            source = CsvRowSource(path)
            list(source.rows())
