"""Tests for run configuration and the sample size bound."""

import math

import pytest

from afdclean import CleanerConfig, ConfigurationError, sample_size
from afdclean.config import SAMPLE_OFFSET


class TestSampleSize:
    """Test the sample size formula."""

    def test_known_value(self):
        assert sample_size(10000, 0.05, 0.05, 4) == 13991

    @pytest.mark.parametrize(
        "n_rows,epsilon,delta,k",
        [(1, 0.5, 0.5, 1), (400, 0.5, 0.5, 2), (123456, 0.01, 0.1, 7)],
    )
    def test_matches_formula(self, n_rows, epsilon, delta, k):
        expected = math.floor(math.sqrt(n_rows) / epsilon * (k + math.log(1 / delta)))
        assert sample_size(n_rows, epsilon, delta, k) == expected

    @pytest.mark.parametrize(
        "args", [(100, 0.0, 0.05, 2), (100, 0.1, 0.0, 2), (100, 0.1, 1.5, 2), (-1, 0.1, 0.1, 2)]
    )
    def test_invalid_arguments(self, args):
        with pytest.raises(ConfigurationError):
            sample_size(*args)


class TestCleanerConfig:
    """Test option validation."""

    def test_defaults(self):
        config = CleanerConfig(("A", "B"))

        assert config.attributes == ["A", "B"]
        assert config.epsilon == 0.05
        assert config.delta == 0.05
        assert not config.sampled
        assert not config.chunked

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"attributes": []},
            {"attributes": "AB"},
            {"attributes": ["A", "A"]},
            {"attributes": ["A", ""]},
            {"attributes": ["A:B"]},
            {"attributes": ["A"], "epsilon": -0.1},
            {"attributes": ["A"], "epsilon": 1.5},
            {"attributes": ["A"], "delta": 0},
            {"attributes": ["A"], "epsilon": 0, "sampled": True},
            {"attributes": ["A"], "chunk_size": 0},
            {"attributes": ["A"], "chunk_size": 2.5},
            {"attributes": ["A"], "chunk_size": True},
            {"attributes": ["A"], "epsilon": "0.1"},
            {"attributes": ["A"], "delta": None},
            {"attributes": ["A"], "epsilon": True},
            {"attributes": ["A"], "epsilon": float("nan")},
        ],
    )
    def test_invalid_options(self, kwargs):
        with pytest.raises(ConfigurationError):
            CleanerConfig(**kwargs)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            CleanerConfig(["A"], epsilon=2)

    def test_exact_search_allowed(self):
        assert CleanerConfig(["A"], epsilon=0).epsilon == 0


class TestWindow:
    """Test which rows a run reads."""

    def test_whole_table_without_sampling(self):
        assert CleanerConfig(["A"]).window(50) == (0, 50)

    def test_sample_after_offset(self):
        config = CleanerConfig(["A", "B"], epsilon=0.5, delta=0.5, sampled=True)
        assert config.window(400) == (SAMPLE_OFFSET, 107)

    def test_large_sample_reads_whole_table(self):
        config = CleanerConfig(["A", "B"], sampled=True)
        assert config.window(100) == (0, 100)

    def test_empty_table(self):
        config = CleanerConfig(["A"], sampled=True)
        assert config.window(0) == (0, 0)


class TestFromMapping:
    """Test building a config from plain mappings."""

    def test_camel_case_alias(self):
        config = CleanerConfig.from_mapping(
            {"attributes": ["A", "B"], "epsilon": 0.1, "chunkSize": 1000}
        )
        assert config.chunk_size == 1000
        assert config.epsilon == 0.1

    def test_snake_case(self):
        config = CleanerConfig.from_mapping({"attributes": ["A"], "chunk_size": 5})
        assert config.chunked

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError, match="Unknown option"):
            CleanerConfig.from_mapping({"attributes": ["A"], "speed": 3})

    def test_missing_attributes(self):
        with pytest.raises(ConfigurationError, match="attributes"):
            CleanerConfig.from_mapping({"epsilon": 0.1})

    def test_non_numeric_epsilon_from_json(self):
        with pytest.raises(ConfigurationError, match="epsilon must be a number"):
            CleanerConfig.from_mapping({"attributes": ["A"], "epsilon": "0.1"})
