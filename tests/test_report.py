"""Tests for text reports and summary frames."""

from datetime import datetime

import pandas as pd

from afdclean import (
    CleanerConfig,
    dependencies_frame,
    discover_dependencies,
    format_report,
    write_report,
)


class TestFormatReport:
    """Test the text report."""

    def test_blocks(self, noisy_df):
        result = discover_dependencies(noisy_df, epsilon=0.1)
        config = CleanerConfig(list(noisy_df.columns), epsilon=0.1, chunk_size=4)

        text = format_report(
            result, table="cities.csv", config=config, started=datetime(2024, 5, 6, 7, 8, 9)
        )

        assert text.startswith("================ General ============\n")
        assert "Date: 2024-05-06 07:08:09\n" in text
        assert "Number of rows: 10\n" in text
        assert "Sample size: not sampled\n" in text
        assert "Chunk size: 4\n" in text
        assert "Table: cities.csv\n" in text
        assert "Epsilon: 0.1\n" in text
        assert "Dependencies found: 4\n" in text
        assert "Dependency: city->country\nTo delete (1): [9]\n" in text
        assert "Dependency: zip->city\nTo delete (0): []\n" in text

    def test_without_dependencies(self):
        df = pd.DataFrame({"A": [1, 1, 2, 2], "B": [1, 2, 1, 2]})
        text = format_report(discover_dependencies(df, epsilon=0))

        assert "Dependencies found: 0\n" in text
        assert "Dependencies ====" not in text
        assert "Chunk size" not in text

    def test_key_attributes_listed(self):
        df = pd.DataFrame({"id": [1, 2, 3], "A": [1, 1, 2]})
        text = format_report(discover_dependencies(df))

        assert "Key attributes: id\n" in text


class TestWriteReport:
    """Test report files."""

    def test_file_name_and_content(self, tmp_path):
        path = write_report(
            "hello\n", tmp_path / "reports", timestamp=datetime(2024, 5, 6, 7, 8)
        )

        assert path == tmp_path / "reports" / "report-20240506-0708.report"
        assert path.read_text(encoding="utf-8") == "hello\n"


class TestDependenciesFrame:
    """Test the pandas summary."""

    def test_columns_and_values(self, noisy_df):
        frame = dependencies_frame(discover_dependencies(noisy_df, epsilon=0.1))

        assert list(frame.columns) == [
            "dependency", "lhs", "rhs", "violations", "ratio", "exact"
        ]
        first = frame.iloc[0]
        assert first["dependency"] == "city->country"
        assert first["violations"] == 1
        assert first["ratio"] == 0.1
        assert not first["exact"]
        assert frame["exact"].sum() == 2

    def test_empty(self):
        df = pd.DataFrame({"A": [1, 1, 2, 2], "B": [1, 2, 1, 2]})
        frame = dependencies_frame(discover_dependencies(df, epsilon=0))

        assert frame.empty
        assert "ratio" in frame.columns
