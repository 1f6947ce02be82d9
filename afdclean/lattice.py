"""Level-wise lattice search for approximate functional dependencies.

The search walks the lattice of attribute sets level by level, starting
with single attributes. At level k it checks, for every set X of size k
and every attribute A of X still in X's candidate list, the dependency
X \\ {A} -> A. A dependency is accepted when the rows that would have to
be deleted for it to hold exactly make up at most ``epsilon`` of the
analysed rows.

Pruning
-------
- Candidate lists: the right-hand sides still worth checking for X are
  those allowed by every immediate subset of X. An accepted dependency
  removes its right-hand side from the list, and an exact one removes
  every attribute outside X as well.
- Sets with an empty candidate list, and sets whose partition is a key
  for the analysed rows, are not extended.
- A set of size k+1 is generated only if all of its subsets of size k
  survived pruning.

The partition of every set is computed at most once, lazily, from the
partitions of its prefix and its last attribute.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import pandas as pd

from .config import CleanerConfig
from .core import AttributeSet, Dependency, RunStats
from .errors import ConfigurationError, MalformedAttributeSetError, RunCancelledError
from .partition import Partition
from .partitioner import build_base_partitions
from .source import DataFrameRowSource, RowSource
from .types import Attribute, RowId

logger = logging.getLogger(__name__)

ROOT = AttributeSet()


@dataclass
class CleanerResult:
    """Outcome of one run.

    Attributes
    ----------
    dependencies : list[Dependency]
        Accepted dependencies in discovery order
    stats : RunStats
        Counters of the run
    total_rows : int
        Number of rows analysed (the sample in sampling mode)
    table_rows : int
        Number of rows in the table
    sample_size : int, optional
        Computed sample size, None when not sampling
    attribute_order : list[Attribute]
        Traversal order of the attributes
    excluded_keys : list[Attribute]
        Attributes left out because they alone identify every row
    elapsed : float
        Wall-clock seconds spent in the run
    """

    dependencies: list[Dependency]
    stats: RunStats
    total_rows: int
    table_rows: int
    sample_size: int | None = None
    attribute_order: list[Attribute] = field(default_factory=list)
    excluded_keys: list[Attribute] = field(default_factory=list)
    elapsed: float = 0.0

    def dependency(self, key: str) -> Dependency | None:
        """Look up a dependency by its ``lhs->rhs`` text."""
        lhs, rhs = Dependency.parse_key(key)
        for dep in self.dependencies:
            if dep.rhs == rhs and set(dep.lhs) == set(lhs):
                return dep
        return None

    def keys(self) -> list[str]:
        """Canonical text of every dependency, in discovery order."""
        return [dep.key for dep in self.dependencies]

    def as_dict(self) -> dict[str, list[RowId]]:
        """Mapping ``lhs->rhs`` to the sorted violating rows."""
        return {dep.key: sorted(dep.violating_rows) for dep in self.dependencies}


class LatticeEngine:
    """Runs the lattice search over one row source.

    Parameters
    ----------
    source : RowSource
        Where the rows come from
    config : CleanerConfig
        Run options
    """

    def __init__(self, source: RowSource, config: CleanerConfig) -> None:
        self.source = source
        self.config = config
        self.stats = RunStats()
        self.dependencies: list[Dependency] = []
        self.partitions: dict[AttributeSet, Partition] = {}
        self.candidate_lists: dict[AttributeSet, set[Attribute]] = {}
        self.attributes: list[Attribute] = list(config.attributes)
        self._ranking = {a: i for i, a in enumerate(self.attributes)}
        self.excluded_keys: list[Attribute] = []
        self.number_of_rows = 0
        self.table_rows = 0
        self.sample_size: int | None = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _create_partitions(self) -> None:
        """Read the analysed rows and build the stripped base partitions."""
        missing = [a for a in self.config.attributes if a not in self.source.columns]
        if missing:
            raise ConfigurationError(f"Attributes not in row source: {missing}")

        self.table_rows = self.source.row_count()
        offset, count = self.config.window(self.table_rows)
        if self.config.sampled:
            self.sample_size = count
        logger.info(
            "Reading %d of %d rows from offset %d%s",
            count,
            self.table_rows,
            offset,
            f" in chunks of {self.config.chunk_size}" if self.config.chunked else "",
        )

        base, self.number_of_rows = build_base_partitions(
            self.source,
            self.config.attributes,
            offset=offset,
            count=count,
            chunk_size=self.config.chunk_size,
            stats=self.stats,
        )
        self.partitions = {AttributeSet.of(a): p for a, p in base.items()}

    def _sort_base_partitions(self) -> None:
        """Order attributes by ascending number of equivalence classes."""
        self.attributes.sort(
            key=lambda a: self.partitions[AttributeSet.of(a)].distinct_count
        )
        self._ranking = {a: i for i, a in enumerate(self.attributes)}

    def _initial_level(self) -> list[AttributeSet]:
        level = []
        for attr in self.attributes:
            if self.partitions[AttributeSet.of(attr)].is_key(self.number_of_rows):
                logger.info("Excluding key attribute %s", attr)
                self.excluded_keys.append(attr)
            else:
                level.append(AttributeSet.of(attr))
        self.candidate_lists = {ROOT: {x.last for x in level}}
        return level

    # ------------------------------------------------------------------
    # Partition cache
    # ------------------------------------------------------------------

    def partition_for(self, attributes: AttributeSet) -> Partition:
        """Return the partition of ``attributes``, computing and caching it."""
        cached = self.partitions.get(attributes)
        if cached is not None:
            return cached
        if attributes.size <= 1:
            raise MalformedAttributeSetError(f"No base partition for {attributes!r}")
        partition = self.partition_for(attributes.prefix).multiply(
            self.partition_for(AttributeSet.of(attributes.last)), self.stats
        )
        self.partitions[attributes] = partition
        return partition

    def _clean_partitions(self, level_number: int) -> None:
        """Drop cached partitions no later level refines from."""
        for attributes in list(self.partitions):
            if 2 <= attributes.size < level_number - 1:
                logger.debug("Cleaning up partition for %s", attributes)
                del self.partitions[attributes]

    # ------------------------------------------------------------------
    # One level
    # ------------------------------------------------------------------

    def _refresh_candidates(self, level: Sequence[AttributeSet]) -> None:
        """Intersect the candidate lists of every set's immediate subsets."""
        new_candidates: dict[AttributeSet, set[Attribute]] = {}
        for attributes in level:
            subsets = [ROOT] if attributes.size == 1 else attributes.subsets()
            candidates: set[Attribute] | None = None
            for subset in subsets:
                inherited = self.candidate_lists.get(subset)
                if inherited is None:
                    continue
                if candidates is None:
                    candidates = set(inherited)
                else:
                    candidates &= inherited
            new_candidates[attributes] = candidates or set()
        self.candidate_lists = new_candidates

    def check_dependency(self, lhs: AttributeSet, rhs: Attribute) -> set[RowId] | None:
        """Rows to delete for ``lhs -> rhs`` to hold, None for an empty ``lhs``."""
        if not lhs:
            return None
        self.stats.performed_checks += 1
        logger.debug("Checking dependency %s->%s", lhs, rhs)

        full = AttributeSet.ordered(lhs.union(rhs), self._ranking)
        left = self.partition_for(lhs)
        extended = self.partitions.get(full)
        if extended is None:
            extended = left.multiply(self.partition_for(AttributeSet.of(rhs)), self.stats)
            extended.attributes = full
        to_delete, extended = left.rows_to_delete(extended, self.stats)
        self.partitions[full] = extended
        return to_delete

    def compute_dependencies(self, level: Sequence[AttributeSet]) -> None:
        """Check every dependency the level allows and update candidate lists."""
        self._refresh_candidates(level)

        for attributes in level:
            candidates = self.candidate_lists[attributes]
            if not candidates:
                continue
            for attr in attributes:
                self.stats.possible_checks += 1
                if attr not in candidates:
                    continue
                lhs = attributes.minus(attr)
                to_delete = self.check_dependency(lhs, attr)
                if to_delete is None:
                    continue
                if len(to_delete) / self.number_of_rows > self.config.epsilon:
                    continue

                dep = Dependency(lhs, attr, frozenset(to_delete))
                logger.debug(
                    "Found dependency %s (%d rows to delete)", dep, len(to_delete)
                )
                self.dependencies.append(dep)
                candidates.discard(attr)
                if not to_delete:
                    for other in self.config.attributes:
                        if other not in attributes and other in candidates:
                            logger.debug(
                                "Removing attribute from candidate list of %s: %s",
                                attributes,
                                other,
                            )
                            candidates.discard(other)

    def prune(self, level: Sequence[AttributeSet]) -> list[AttributeSet]:
        """Drop sets with no candidates left and sets that are keys."""
        result = []
        for attributes in level:
            if not self.candidate_lists.get(attributes):
                continue
            partition = self.partitions.get(attributes)
            if partition is not None and partition.is_key(self.number_of_rows):
                continue
            result.append(attributes)
        return result

    @staticmethod
    def generate_next_level(level: Sequence[AttributeSet]) -> list[AttributeSet]:
        """Join sets sharing all but their last attribute.

        A joined set is kept only if every one of its immediate subsets is in
        ``level``. For single attributes the shared prefix is empty, so every
        pair is produced.
        """
        present = set(level)
        blocks: dict[AttributeSet, list[Attribute]] = {}
        for attributes in level:
            blocks.setdefault(attributes.prefix, []).append(attributes.last)

        result = []
        for prefix, suffixes in blocks.items():
            for i, first in enumerate(suffixes):
                for second in suffixes[i + 1 :]:
                    candidate = prefix.union(first).union(second)
                    if all(subset in present for subset in candidate.subsets()):
                        result.append(candidate)
        return result

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self, should_cancel: Callable[[], bool] | None = None) -> CleanerResult:
        """Run the search to completion.

        Parameters
        ----------
        should_cancel : Callable[[], bool], optional
            Polled between levels; returning True aborts the run

        Returns
        -------
        CleanerResult
            The dependencies found and the run counters

        Raises
        ------
        RunCancelledError
            If ``should_cancel`` asked to stop.
        """
        started = time.perf_counter()
        self._create_partitions()
        self._sort_base_partitions()
        level = self._initial_level()

        level_number = 1
        while level:
            if should_cancel is not None and should_cancel():
                raise RunCancelledError(f"Cancelled before level {level_number}")
            logger.info("Level %d: %d attribute sets", level_number, len(level))
            self.compute_dependencies(level)
            self._clean_partitions(level_number)
            level = self.prune(level)
            level = self.generate_next_level(level)
            self.stats.levels_processed += 1
            level_number += 1

        elapsed = time.perf_counter() - started
        logger.info(
            "Found %d dependencies in %.3fs (%d of %d possible checks performed)",
            len(self.dependencies),
            elapsed,
            self.stats.performed_checks,
            self.stats.possible_checks,
        )
        return CleanerResult(
            dependencies=list(self.dependencies),
            stats=self.stats,
            total_rows=self.number_of_rows,
            table_rows=self.table_rows,
            sample_size=self.sample_size,
            attribute_order=list(self.attributes),
            excluded_keys=list(self.excluded_keys),
            elapsed=elapsed,
        )


def run(
    source: RowSource,
    config: CleanerConfig,
    *,
    should_cancel: Callable[[], bool] | None = None,
) -> CleanerResult:
    """Discover approximate dependencies in ``source``.

    Parameters
    ----------
    source : RowSource
        Where the rows come from
    config : CleanerConfig
        Run options
    should_cancel : Callable[[], bool], optional
        Polled between levels; returning True aborts the run

    Returns
    -------
    CleanerResult
        The dependencies found and the run counters
    """
    return LatticeEngine(source, config).run(should_cancel)


def discover_dependencies(
    df: pd.DataFrame,
    attributes: Sequence[Attribute] | None = None,
    *,
    epsilon: float = 0.05,
    delta: float = 0.05,
    sampled: bool = False,
    chunk_size: int | None = None,
) -> CleanerResult:
    """Discover approximate dependencies among the columns of a DataFrame.

    Parameters
    ----------
    df : pd.DataFrame
        The table
    attributes : Sequence[Attribute], optional
        Columns to analyse. If None, use all columns
    epsilon : float, default 0.05
        Maximum fraction of rows a dependency may need deleted
    delta : float, default 0.05
        Confidence parameter of the sample size
    sampled : bool, default False
        Analyse a prefix sample of the table
    chunk_size : int, optional
        Build base partitions this many rows at a time

    Returns
    -------
    CleanerResult
        The dependencies found and the run counters

    Examples
    --------
    >>> df = pd.DataFrame({"A": [1, 1, 2, 2, 3], "B": [1, 1, 2, 2, 3]})
    >>> discover_dependencies(df, epsilon=0).keys()
    ['B->A', 'A->B']
    """
    if attributes is None:
        attributes = [str(c) for c in df.columns]
    config = CleanerConfig(
        attributes=attributes,
        epsilon=epsilon,
        delta=delta,
        sampled=sampled,
        chunk_size=chunk_size,
    )
    return run(DataFrameRowSource(df, config.attributes), config)
