"""Stripped partitions, the data structure behind the lattice search.

A partition of the rows by an attribute set X groups rows into equivalence
classes: two rows share a class iff they agree on every attribute of X.
The *stripped* variant drops singleton classes and only remembers their
row ids, since a row that is alone in its class can never witness a
violation.

    X -> A holds  <=>  every class of X lies inside one class of X ∪ {A}

For an approximate dependency the question becomes how many rows must go.
Within each class C of X the rows split into sub-groups by their value on
A. Keeping the largest sub-group and deleting everything else is the
cheapest repair of C, and the repairs of different classes are
independent, so the union of the per-class deletions is a minimum-size
deletion set. :meth:`Partition.rows_to_delete` computes it from the two
stripped partitions without looking at the data again.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .core import AttributeSet, RunStats
from .types import RowId, Value

_UNCLASSIFIED = object()


class EquivalenceClass:
    """Row ids that share one value on an attribute set.

    Parameters
    ----------
    classifier : Value, optional
        The shared value. Classes produced by refinement have none.
    """

    __slots__ = ("classifier", "representative", "_rows")

    def __init__(self, classifier: Any = _UNCLASSIFIED) -> None:
        self.classifier = classifier
        self.representative: RowId | None = None
        self._rows: list[RowId] = []

    @property
    def classified(self) -> bool:
        """True if the class knows its shared value."""
        return self.classifier is not _UNCLASSIFIED

    def add_row(self, row_id: RowId) -> None:
        """Append a row id; the first one becomes the representative."""
        if self.representative is None:
            self.representative = row_id
        self._rows.append(row_id)

    def add_rows(self, row_ids: Iterable[RowId]) -> None:
        """Append several row ids in order."""
        for row_id in row_ids:
            self.add_row(row_id)

    def contains(self, row_id: RowId) -> bool:
        """True if ``row_id`` is a member."""
        return row_id in self._rows

    def size(self) -> int:
        """Number of member rows."""
        return len(self._rows)

    def rows(self) -> list[RowId]:
        """Member row ids in insertion order (a copy)."""
        return list(self._rows)

    def copy(self) -> EquivalenceClass:
        """A class with the same classifier and rows."""
        clone = EquivalenceClass(self.classifier)
        clone.add_rows(self._rows)
        return clone

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def __repr__(self) -> str:
        label = self.classifier if self.classified else "*"
        return f"[{label}: {self._rows}]"


class Partition:
    """The equivalence classes of one attribute set.

    Parameters
    ----------
    attributes : AttributeSet
        The attribute set the partition belongs to
    classes : Iterable[EquivalenceClass], optional
        Initial classes (taken over, not copied)
    stripped_rows : Iterable[RowId], optional
        Rows already known to be singletons
    """

    def __init__(
        self,
        attributes: AttributeSet,
        classes: Iterable[EquivalenceClass] | None = None,
        stripped_rows: Iterable[RowId] | None = None,
    ) -> None:
        self.attributes = attributes
        self.classes: list[EquivalenceClass] = list(classes or [])
        self.stripped_rows: set[RowId] = set(stripped_rows or ())
        self.stripped = bool(self.stripped_rows)
        self._by_classifier: dict[Any, EquivalenceClass] = {
            cl.classifier: cl for cl in self.classes if cl.classified
        }

    @property
    def level(self) -> int:
        """Size of the attribute set."""
        return self.attributes.size

    @property
    def num_classes(self) -> int:
        """Number of materialized classes."""
        return len(self.classes)

    @property
    def stripped_count(self) -> int:
        """Number of rows removed as singletons."""
        return len(self.stripped_rows)

    @property
    def distinct_count(self) -> int:
        """Number of equivalence classes, singletons included."""
        return len(self.classes) + len(self.stripped_rows)

    @property
    def row_count(self) -> int:
        """Number of rows covered by classes and stripped set together."""
        return sum(cl.size() for cl in self.classes) + len(self.stripped_rows)

    def is_key(self, total_rows: int) -> bool:
        """True if every row is alone in its class."""
        return self.distinct_count == total_rows

    def class_with_classifier(self, value: Value) -> EquivalenceClass | None:
        """The class whose shared value is ``value``, if any."""
        return self._by_classifier.get(value)

    def add_row(self, row_id: RowId, value: Value) -> None:
        """Put ``row_id`` into the class of ``value``, creating it if needed."""
        eq_class = self._by_classifier.get(value)
        if eq_class is None:
            eq_class = EquivalenceClass(value)
            self._by_classifier[value] = eq_class
            self.classes.append(eq_class)
        eq_class.add_row(row_id)

    def strip(self, stats: RunStats | None = None) -> int:
        """Remove singleton classes, remembering their rows.

        Safe to call again: once stripped there are no singletons left.

        Returns
        -------
        int
            Number of rows stripped by this call
        """
        kept = []
        removed = 0
        for cl in self.classes:
            if cl.size() == 1:
                self.stripped_rows.add(cl.representative)
                if cl.classified:
                    self._by_classifier.pop(cl.classifier, None)
                removed += 1
            else:
                kept.append(cl)
        self.classes = kept
        self.stripped = True
        if stats is not None:
            stats.stripped_row_total += removed
        return removed

    def multiply(self, other: Partition, stats: RunStats | None = None) -> Partition:
        """Refine this partition by ``other``.

        The product belongs to the union of both attribute sets: two rows
        share a class of the product iff they share a class in both
        partitions. Rows stripped from either input are singletons of the
        product too and land directly in its stripped set.

        Parameters
        ----------
        other : Partition
            Partition of the attribute set to refine by
        stats : RunStats, optional
            Accumulator for iteration and stripping counters

        Returns
        -------
        Partition
            The stripped product partition
        """
        class_of: dict[RowId, int] = {}
        for index, cl in enumerate(self.classes):
            for row_id in cl:
                class_of[row_id] = index

        attributes = self.attributes
        for attr in other.attributes:
            attributes = attributes.union(attr)
        result = Partition(attributes)
        result.stripped_rows = self.stripped_rows | other.stripped_rows

        iterations = 0
        for cl in other.classes:
            buckets: dict[int, EquivalenceClass] = {}
            for row_id in cl:
                iterations += 1
                index = class_of.get(row_id)
                if index is None:
                    # stripped from self, already recorded
                    continue
                bucket = buckets.get(index)
                if bucket is None:
                    bucket = EquivalenceClass()
                    buckets[index] = bucket
                bucket.add_row(row_id)
            result.classes.extend(buckets.values())

        if stats is not None:
            stats.refinement_iterations += iterations
            stats.partitions_computed += 1
        result.strip(stats)
        return result

    def union(self, other: Partition) -> Partition:
        """Merge with a partition of the same attributes over other rows.

        Classes with equal classifiers are merged, the rest are appended.
        Neither input is modified. Both must still be unstripped, since a
        singleton of one chunk may grow once the chunks are merged.

        Raises
        ------
        ValueError
            If the attribute sets differ or an input is already stripped.
        """
        if self.attributes != other.attributes:
            raise ValueError(
                f"Cannot union partitions of {self.attributes} and {other.attributes}"
            )
        if self.stripped or other.stripped:
            raise ValueError("Partitions must be merged before stripping")

        merged = [cl.copy() for cl in self.classes]
        result = Partition(self.attributes, merged)
        for cl in other.classes:
            target = result._by_classifier.get(cl.classifier) if cl.classified else None
            if target is not None:
                target.add_rows(cl)
            else:
                clone = cl.copy()
                result.classes.append(clone)
                if clone.classified:
                    result._by_classifier[clone.classifier] = clone
        return result

    def singleton_rows(self) -> set[RowId]:
        """Rows alone in their class: stripped or in a one-row class."""
        rows = set(self.stripped_rows)
        for cl in self.classes:
            if cl.size() == 1:
                rows.add(cl.representative)
        return rows

    def rows_to_delete(
        self, extended: Partition | None, stats: RunStats | None = None
    ) -> tuple[set[RowId], Partition]:
        """Rows to delete so that ``self.attributes -> A`` holds exactly.

        ``extended`` is the partition of this attribute set plus ``A``. For
        every class of this partition the largest sub-group under
        ``extended`` is kept and the rows of every other sub-group are
        scheduled for deletion. When all sub-groups of a class were
        stripped, one of its rows is put back into ``extended`` as a
        singleton class and kept.

        Parameters
        ----------
        extended : Partition
            Partition of this attribute set plus one more attribute
        stats : RunStats, optional
            Accumulator for iteration counters

        Returns
        -------
        tuple[set[RowId], Partition]
            The deletion set and the partition to use for ``extended`` from
            now on (a new object when rows were put back, else ``extended``)

        Raises
        ------
        ValueError
            If ``extended`` is missing.
        """
        if extended is None:
            raise ValueError(
                f"Dependency on {self.attributes} not checkable yet: "
                "extended partition missing"
            )

        result: set[RowId] = set()
        iterations = 0

        size_of: dict[RowId, int] = {}
        class_of: dict[RowId, EquivalenceClass] = {}
        for cl in extended.classes:
            size_of[cl.representative] = cl.size()
            for row_id in cl:
                class_of[row_id] = cl
            iterations += 1

        restored: list[RowId] = []
        for cl in self.classes:
            largest = 0
            largest_row = None
            for row_id in cl:
                size = size_of.get(row_id)
                if size is not None and size > largest:
                    largest = size
                    largest_row = row_id
                iterations += 1

            if largest == 0:
                # every sub-group was stripped; keep the first row
                restored.append(cl.representative)
                continue

            kept = class_of[largest_row]
            kept_rows = set(kept)
            for row_id in cl:
                iterations += 1
                if row_id in kept_rows or row_id in result:
                    continue
                sub_group = class_of.get(row_id)
                if sub_group is not None and sub_group is not kept:
                    result.update(sub_group)

        # singletons under extended that were grouped under self
        singletons = self.singleton_rows()
        restored_set = set(restored)
        for row_id in extended.stripped_rows:
            iterations += 1
            if row_id not in singletons and row_id not in restored_set:
                result.add(row_id)

        if stats is not None:
            stats.refinement_iterations += iterations

        if not restored:
            return result, extended
        return result, extended.restore_singletons(restored)

    def restore_singletons(self, row_ids: Iterable[RowId]) -> Partition:
        """A copy with ``row_ids`` moved from the stripped set to own classes."""
        row_ids = [row_id for row_id in row_ids if row_id in self.stripped_rows]
        classes = list(self.classes)
        for row_id in row_ids:
            singleton = EquivalenceClass()
            singleton.add_row(row_id)
            classes.append(singleton)
        result = Partition(self.attributes, classes, self.stripped_rows - set(row_ids))
        result.stripped = True
        return result

    def groups(self) -> list[list[RowId]]:
        """Materialized classes as sorted row-id lists, sorted."""
        return sorted(sorted(cl.rows()) for cl in self.classes)

    def __repr__(self) -> str:
        body = "".join(repr(cl) for cl in self.classes)
        return f"[partition {self.attributes}: {body} stripped={sorted(self.stripped_rows)}]"
