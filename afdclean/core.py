"""Core value types for afdclean.

This module defines the fundamental building blocks shared by the partition
code and the lattice search:
- AttributeSet: an ordered, duplicate-free set of attributes (a lattice node)
- Dependency: a discovered approximate dependency and its violating rows
- RunStats: per-run counters
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from .errors import MalformedAttributeSetError
from .types import Attribute, RowId

SEPARATOR = ":"
ARROW = "->"


@dataclass(frozen=True)
class AttributeSet:
    """An ordered, duplicate-free sequence of attributes.

    The order is the traversal order of the lattice search. Every set the
    search derives from another one keeps the relative order of its
    attributes, so the tuple (and the colon-joined ``key``) is canonical.

    Attributes
    ----------
    attributes : tuple[Attribute, ...]
        The attributes, in canonical order
    """

    attributes: tuple[Attribute, ...] = ()

    def __post_init__(self):
        """Validate the attribute tuple."""
        attrs = tuple(self.attributes)
        object.__setattr__(self, "attributes", attrs)
        if len(set(attrs)) != len(attrs):
            raise MalformedAttributeSetError(f"Duplicate attribute in {attrs!r}")
        for attr in attrs:
            if not isinstance(attr, str) or not attr or SEPARATOR in attr:
                raise MalformedAttributeSetError(
                    f"Invalid attribute name {attr!r} in {attrs!r}"
                )

    @classmethod
    def of(cls, *attributes: Attribute) -> AttributeSet:
        """Build a set from attributes given in canonical order."""
        return cls(tuple(attributes))

    @classmethod
    def parse(cls, key: str) -> AttributeSet:
        """Parse the colon-joined canonical form (``""`` is the empty set).

        Raises
        ------
        MalformedAttributeSetError
            If a component is empty or repeated.
        """
        if key == "":
            return cls()
        parts = key.split(SEPARATOR)
        if any(not part for part in parts):
            raise MalformedAttributeSetError(f"Empty attribute in key {key!r}")
        return cls(tuple(parts))

    @classmethod
    def ordered(
        cls, attributes: Iterable[Attribute], ranking: Mapping[Attribute, int]
    ) -> AttributeSet:
        """Build a set ordered by ``ranking`` (attribute -> position)."""
        try:
            return cls(tuple(sorted(attributes, key=ranking.__getitem__)))
        except KeyError as exc:
            raise MalformedAttributeSetError(
                f"Attribute {exc.args[0]!r} has no rank"
            ) from exc

    @property
    def key(self) -> str:
        """Colon-joined canonical text, used for reporting and lookups."""
        return SEPARATOR.join(self.attributes)

    @property
    def size(self) -> int:
        """Number of attributes, i.e. the lattice level of the set."""
        return len(self.attributes)

    @property
    def prefix(self) -> AttributeSet:
        """Everything but the last attribute."""
        return AttributeSet(self.attributes[:-1])

    @property
    def last(self) -> Attribute:
        """The last attribute in canonical order."""
        if not self.attributes:
            raise MalformedAttributeSetError("The empty set has no last attribute")
        return self.attributes[-1]

    def union(self, attribute: Attribute) -> AttributeSet:
        """Return this set with ``attribute`` appended."""
        if attribute in self.attributes:
            return self
        return AttributeSet(self.attributes + (attribute,))

    def minus(self, attribute: Attribute) -> AttributeSet:
        """Return this set without ``attribute``."""
        return AttributeSet(tuple(a for a in self.attributes if a != attribute))

    def subsets(self) -> list[AttributeSet]:
        """All immediate subsets (one attribute removed), in attribute order."""
        return [
            AttributeSet(self.attributes[:i] + self.attributes[i + 1 :])
            for i in range(len(self.attributes))
        ]

    def __len__(self) -> int:
        return len(self.attributes)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self.attributes)

    def __contains__(self, attribute: object) -> bool:
        return attribute in self.attributes

    def __str__(self) -> str:
        return self.key

    def __repr__(self) -> str:
        return f"AttributeSet({self.key!r})"


@dataclass(frozen=True)
class Dependency:
    """An approximate functional dependency ``lhs -> rhs``.

    Attributes
    ----------
    lhs : AttributeSet
        Left-hand side attributes
    rhs : Attribute
        Right-hand side attribute
    violating_rows : frozenset[RowId]
        Rows whose removal makes the dependency hold exactly
    """

    lhs: AttributeSet
    rhs: Attribute
    violating_rows: frozenset[RowId] = field(default_factory=frozenset)

    @property
    def key(self) -> str:
        """Canonical text ``lhsAttr1:lhsAttr2->rhsAttr``."""
        return f"{self.lhs.key}{ARROW}{self.rhs}"

    @property
    def full_set(self) -> AttributeSet:
        """The set ``lhs`` plus ``rhs``, as the search builds it."""
        return self.lhs.union(self.rhs)

    @property
    def is_exact(self) -> bool:
        """True if no row needs to be deleted."""
        return not self.violating_rows

    @property
    def violation_count(self) -> int:
        """Number of rows to delete."""
        return len(self.violating_rows)

    def violation_ratio(self, total_rows: int) -> float:
        """Fraction of ``total_rows`` that has to be deleted."""
        if total_rows <= 0:
            return 0.0
        return len(self.violating_rows) / total_rows

    @staticmethod
    def parse_key(key: str) -> tuple[AttributeSet, Attribute]:
        """Split ``lhs->rhs`` text into its two sides.

        Raises
        ------
        MalformedAttributeSetError
            If the arrow is missing or repeated, or a side is empty.
        """
        parts = key.split(ARROW)
        if len(parts) != 2:
            raise MalformedAttributeSetError(f"Not a dependency: {key!r}")
        lhs_text, rhs = parts
        if not lhs_text or not rhs or SEPARATOR in rhs:
            raise MalformedAttributeSetError(f"Not a dependency: {key!r}")
        lhs = AttributeSet.parse(lhs_text)
        if rhs in lhs:
            raise MalformedAttributeSetError(f"Trivial dependency: {key!r}")
        return lhs, rhs

    def __str__(self) -> str:
        return self.key


@dataclass
class RunStats:
    """Counters accumulated during one run.

    Attributes
    ----------
    possible_checks : int
        (set, attribute) pairs considered as a dependency
    performed_checks : int
        Dependencies whose deletion set was actually computed
    refinement_iterations : int
        Low-level loop iterations spent in partition operators
    stripped_row_total : int
        Rows removed as singletons by every ``strip`` call
    levels_processed : int
        Lattice levels checked
    partitions_computed : int
        Partitions built by ``multiply``
    """

    possible_checks: int = 0
    performed_checks: int = 0
    refinement_iterations: int = 0
    stripped_row_total: int = 0
    levels_processed: int = 0
    partitions_computed: int = 0

    def as_dict(self) -> dict[str, int]:
        """Counters as a plain dictionary."""
        return {
            "possibleChecks": self.possible_checks,
            "performedChecks": self.performed_checks,
            "refinementIterations": self.refinement_iterations,
            "strippedRowTotal": self.stripped_row_total,
            "levelsProcessed": self.levels_processed,
            "partitionsComputed": self.partitions_computed,
        }
