"""Tests for base partition construction, plain and chunked."""

import pandas as pd
import pytest

from afdclean import (
    DataFrameRowSource,
    DataSourceError,
    Partitioner,
    RunStats,
    build_base_partitions,
)


class ShortSource:
    """Claims more rows than it yields."""

    columns = ["A"]

    def row_count(self):
        return 5

    def rows(self, offset=0, count=None):
        data = [(1,), (2,)]
        stop = None if count is None else offset + count
        yield from data[offset:stop]


class TestPartitioner:
    """Test the single-pass partitioner."""

    def test_partition_ids_start_at_zero(self, scenario_source):
        partitioner = Partitioner(scenario_source.rows(), scenario_source.columns)
        partitions = partitioner.partition()

        assert set(partitions) == {"A", "B", "C"}
        assert partitions["A"].groups() == [[0, 1], [2, 3], [4]]
        assert partitioner.number_of_rows == 5
        assert partitioner.next_id == 5
        # stripping is left to the caller
        assert not partitions["A"].stripped

    def test_partition_with_start_id(self, scenario_source):
        partitioner = Partitioner(scenario_source.rows(2, 3), scenario_source.columns)
        partitions = partitioner.partition(100)

        assert partitions["C"].groups() == [[100], [101], [102]]
        assert partitioner.next_id == 103

    def test_attribute_subset(self, scenario_source):
        partitioner = Partitioner(
            scenario_source.rows(), scenario_source.columns, ["C"]
        )
        assert list(partitioner.partition()) == ["C"]

    def test_unknown_attribute(self, scenario_source):
        with pytest.raises(DataSourceError):
            Partitioner(scenario_source.rows(), scenario_source.columns, ["Z"])

    def test_ragged_row(self):
        partitioner = Partitioner(iter([(1, 2), (3,)]), ["A", "B"])
        with pytest.raises(DataSourceError):
            partitioner.partition()


class TestBuildBasePartitions:
    """Test whole-table and chunked construction."""

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 59, 60, 500])
    def test_chunked_matches_single_pass(self, random_df, chunk_size):
        source = DataFrameRowSource(random_df)
        whole, read = build_base_partitions(source, list(random_df.columns))
        chunked, chunked_read = build_base_partitions(
            source, list(random_df.columns), chunk_size=chunk_size
        )

        assert read == chunked_read == len(random_df)
        for col in random_df.columns:
            assert chunked[col].groups() == whole[col].groups()
            assert chunked[col].stripped_rows == whole[col].stripped_rows

    def test_partitions_are_stripped(self, scenario_source):
        stats = RunStats()
        partitions, _ = build_base_partitions(
            scenario_source, ["A", "C"], stats=stats
        )

        assert partitions["A"].groups() == [[0, 1], [2, 3]]
        assert partitions["A"].stripped_rows == {4}
        assert stats.stripped_row_total == 2

    def test_window_ids_are_table_positions(self, scenario_source):
        partitions, read = build_base_partitions(
            scenario_source, ["A"], offset=1, count=3, chunk_size=2
        )

        assert read == 3
        assert partitions["A"].groups() == [[2, 3]]
        assert partitions["A"].stripped_rows == {1}

    def test_singletons_merged_across_chunks(self):
        df = pd.DataFrame({"A": ["x", "y", "z", "x"]})
        partitions, _ = build_base_partitions(
            DataFrameRowSource(df), ["A"], chunk_size=2
        )

        assert partitions["A"].groups() == [[0, 3]]
        assert partitions["A"].stripped_rows == {1, 2}

    def test_empty_table(self):
        df = pd.DataFrame({"A": []})
        partitions, read = build_base_partitions(
            DataFrameRowSource(df), ["A"], chunk_size=10
        )

        assert read == 0
        assert partitions["A"].num_classes == 0

    @pytest.mark.parametrize("chunk_size", [None, 2])
    def test_short_source(self, chunk_size):
        with pytest.raises(DataSourceError):
            build_base_partitions(ShortSource(), ["A"], chunk_size=chunk_size)
