"""Run configuration for the lattice search.

The options mirror what a caller chooses before a run: which attributes to
analyse, the tolerated violation ratio ``epsilon``, the sampling confidence
``delta``, whether to sample, and whether to build partitions in chunks.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any

from .errors import ConfigurationError
from .types import Attribute

SAMPLE_OFFSET = 1
"""Number of leading table rows skipped by sampling mode."""

_ALIASES = {"chunkSize": "chunk_size"}


def sample_size(n_rows: int, epsilon: float, delta: float, attribute_count: int) -> int:
    """Number of rows to analyse in sampling mode.

    ``floor(sqrt(n_rows) / epsilon * (attribute_count + ln(1 / delta)))``

    Parameters
    ----------
    n_rows : int
        Total number of rows in the table
    epsilon : float
        Tolerated violation ratio, must be positive
    delta : float
        Confidence parameter, in (0, 1]
    attribute_count : int
        Number of analysed attributes

    Returns
    -------
    int
        The sample size (may exceed ``n_rows``)
    """
    if epsilon <= 0:
        raise ConfigurationError("Sampling needs a positive epsilon")
    if not 0 < delta <= 1:
        raise ConfigurationError(f"delta must be in (0, 1], got {delta}")
    if n_rows < 0:
        raise ConfigurationError(f"n_rows must be non-negative, got {n_rows}")
    return math.floor(
        (math.sqrt(n_rows) / epsilon) * (attribute_count + math.log(1 / delta))
    )


@dataclass
class CleanerConfig:
    """Options of one dependency discovery run.

    Attributes
    ----------
    attributes : Sequence[Attribute]
        Attributes to analyse, in preference order. Key columns should be
        left out by the caller.
    epsilon : float, default 0.05
        Maximum fraction of rows that may be deleted for a dependency to be
        accepted. ``0`` restricts the search to exact dependencies.
    delta : float, default 0.05
        Confidence parameter of the sample size bound
    sampled : bool, default False
        Analyse a prefix of the table sized by :func:`sample_size`
    chunk_size : int, optional
        Build base partitions ``chunk_size`` rows at a time
    """

    attributes: Sequence[Attribute]
    epsilon: float = 0.05
    delta: float = 0.05
    sampled: bool = False
    chunk_size: int | None = None

    def __post_init__(self):
        """Validate option values."""
        if self.attributes is None or isinstance(self.attributes, str):
            raise ConfigurationError("attributes must be a sequence of names")
        self.attributes = list(self.attributes)
        if not self.attributes:
            raise ConfigurationError("At least one attribute is required")
        if len(set(self.attributes)) != len(self.attributes):
            raise ConfigurationError(f"Duplicate attributes in {self.attributes}")
        for attr in self.attributes:
            if not isinstance(attr, str) or not attr or ":" in attr:
                raise ConfigurationError(f"Invalid attribute name {attr!r}")

        for name in ("epsilon", "delta"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
        if not 0 <= self.epsilon <= 1:
            raise ConfigurationError(f"epsilon must be in [0, 1], got {self.epsilon}")
        if not 0 < self.delta <= 1:
            raise ConfigurationError(f"delta must be in (0, 1], got {self.delta}")
        if self.sampled and self.epsilon == 0:
            raise ConfigurationError("Sampling needs a positive epsilon")
        if self.chunk_size is not None:
            if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
                raise ConfigurationError(
                    f"chunk_size must be an integer, got {self.chunk_size!r}"
                )
            if self.chunk_size <= 0:
                raise ConfigurationError(
                    f"chunk_size must be positive, got {self.chunk_size}"
                )

    @property
    def chunked(self) -> bool:
        """True if base partitions are built chunk by chunk."""
        return self.chunk_size is not None

    def window(self, table_rows: int) -> tuple[int, int]:
        """Return ``(offset, count)`` of the rows a run analyses.

        Without sampling this is the whole table. With sampling it is
        ``sample_size`` rows after a fixed offset of one row, or the whole
        table when the sample would not be smaller than it.
        """
        if not self.sampled:
            return 0, table_rows
        size = sample_size(table_rows, self.epsilon, self.delta, len(self.attributes))
        if size >= table_rows:
            return 0, table_rows
        available = max(table_rows - SAMPLE_OFFSET, 0)
        return SAMPLE_OFFSET, min(size, available)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> CleanerConfig:
        """Build a config from a plain mapping (e.g. parsed JSON).

        Both ``chunk_size`` and ``chunkSize`` are accepted.
        """
        known = {f.name for f in fields(cls)}
        options = {}
        for name, value in mapping.items():
            name = _ALIASES.get(name, name)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {name}")
            options[name] = value
        if "attributes" not in options:
            raise ConfigurationError("Missing required option: attributes")
        return cls(**options)
