"""Shared test fixtures for afdclean tests."""

from collections import defaultdict

import numpy as np
import pandas as pd
import pytest

from afdclean import DataFrameRowSource


@pytest.fixture
def scenario_df():
    """Five rows where A and B determine each other and C is independent."""
    return pd.DataFrame(
        {
            "A": [1, 1, 2, 2, 3],
            "B": [1, 1, 2, 2, 3],
            "C": [1, 2, 1, 2, 3],
        }
    )


@pytest.fixture
def scenario_source(scenario_df):
    """Row source over the scenario table."""
    return DataFrameRowSource(scenario_df)


@pytest.fixture
def noisy_df():
    """City determines country except for one mistyped row."""
    return pd.DataFrame(
        {
            "city": ["Paris", "Paris", "Lyon", "Lyon", "Rome", "Rome", "Milan", "Milan",
                     "Paris", "Rome"],
            "country": ["FR", "FR", "FR", "FR", "IT", "IT", "IT", "IT", "FR", "FR"],
            "zip": [75, 75, 69, 69, 10, 10, 20, 20, 75, 10],
        }
    )


@pytest.fixture
def random_df():
    """Random low-cardinality table for property checks."""
    rng = np.random.default_rng(42)
    n_rows = 60
    return pd.DataFrame(
        {
            "A": rng.integers(0, 3, n_rows),
            "B": rng.integers(0, 4, n_rows),
            "C": rng.integers(0, 2, n_rows),
            "D": rng.integers(0, 6, n_rows),
        }
    )


def brute_force_groups(df, columns, rows=None):
    """Group row positions by their values on ``columns``.

    Returns the groups of size >= 2 as sorted lists, sorted, and the set of
    rows that are alone in their group.
    """
    rows = range(len(df)) if rows is None else rows
    groups = defaultdict(list)
    for r in rows:
        groups[tuple(df.iloc[r][c] for c in columns)].append(r)
    classes = sorted(sorted(g) for g in groups.values() if len(g) > 1)
    singletons = {g[0] for g in groups.values() if len(g) == 1}
    return classes, singletons


def minimal_deletions(df, lhs, rhs):
    """Minimum number of rows to delete for ``lhs -> rhs`` to hold."""
    total = 0
    for _, group in df.groupby(list(lhs)):
        total += len(group) - group[rhs].value_counts().max()
    return total


@pytest.fixture
def group_rows():
    """Brute-force grouping helper."""
    return brute_force_groups


@pytest.fixture
def min_deletions():
    """Brute-force minimal deletion count helper."""
    return minimal_deletions
