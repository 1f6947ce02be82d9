"""Construction of the base (single-attribute) partitions.

:class:`Partitioner` turns a stream of rows into one partition per attribute.
:func:`build_base_partitions` drives it over a row source, either in one pass
or window by window, merging the per-window partitions with
:meth:`Partition.union` and stripping only once everything is merged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .core import AttributeSet, RunStats
from .errors import DataSourceError
from .partition import Partition
from .source import RowSource
from .types import Attribute

logger = logging.getLogger(__name__)


class Partitioner:
    """Builds unstripped base partitions from rows.

    Parameters
    ----------
    rows : Iterable[tuple]
        Rows to consume, values in ``columns`` order
    columns : Sequence[Attribute]
        Column names of the rows
    attributes : Sequence[Attribute], optional
        Attributes to partition. If None, every column
    """

    def __init__(
        self,
        rows: Iterable[tuple],
        columns: Sequence[Attribute],
        attributes: Sequence[Attribute] | None = None,
    ) -> None:
        self.rows = rows
        self.columns = list(columns)
        self.attributes = list(attributes) if attributes is not None else list(columns)
        missing = [a for a in self.attributes if a not in self.columns]
        if missing:
            raise DataSourceError(f"Row source has no columns {missing}")
        self._positions = [self.columns.index(a) for a in self.attributes]
        self.partitions: dict[Attribute, Partition] = {}
        self.number_of_rows: int | None = None
        self.next_id: int | None = None

    def partition(self, start_id: int = 0) -> dict[Attribute, Partition]:
        """Consume the rows, numbering them from ``start_id``.

        Returns
        -------
        dict[Attribute, Partition]
            Unstripped partition of every attribute
        """
        self.partitions = {a: Partition(AttributeSet.of(a)) for a in self.attributes}
        targets = [
            (self.partitions[a], pos) for a, pos in zip(self.attributes, self._positions)
        ]
        width = len(self.columns)
        row_id = start_id
        for row in self.rows:
            if len(row) != width:
                raise DataSourceError(
                    f"Row {row_id} has {len(row)} values, expected {width}"
                )
            for partition, pos in targets:
                partition.add_row(row_id, row[pos])
            row_id += 1

        self.number_of_rows = row_id - start_id
        self.next_id = row_id
        return self.partitions


def build_base_partitions(
    source: RowSource,
    attributes: Sequence[Attribute],
    *,
    offset: int = 0,
    count: int | None = None,
    chunk_size: int | None = None,
    stats: RunStats | None = None,
) -> tuple[dict[Attribute, Partition], int]:
    """Build the stripped base partitions of a row window.

    Row ids are table positions: the first row of the window gets id
    ``offset`` and ids continue without gaps across chunks.

    Parameters
    ----------
    source : RowSource
        Where the rows come from
    attributes : Sequence[Attribute]
        Attributes to partition
    offset : int, default 0
        First table row to read
    count : int, optional
        Number of rows to read. If None, up to the end of the table
    chunk_size : int, optional
        Read and partition this many rows at a time
    stats : RunStats, optional
        Accumulator for stripping counters

    Returns
    -------
    tuple[dict[Attribute, Partition], int]
        Stripped partitions by attribute and the number of rows read

    Raises
    ------
    DataSourceError
        If the source yields fewer rows than requested.
    """
    if count is None:
        count = max(source.row_count() - offset, 0)

    if chunk_size is None:
        partitioner = Partitioner(source.rows(offset, count), source.columns, attributes)
        partitions = partitioner.partition(offset)
        read = partitioner.number_of_rows
    else:
        partitions = None
        read = 0
        while read < count:
            window = min(chunk_size, count - read)
            partitioner = Partitioner(
                source.rows(offset + read, window), source.columns, attributes
            )
            chunk = partitioner.partition(offset + read)
            logger.debug(
                "Partitioned chunk of %d rows starting at %d",
                partitioner.number_of_rows,
                offset + read,
            )
            if partitions is None:
                partitions = chunk
            else:
                partitions = {a: partitions[a].union(chunk[a]) for a in attributes}
            if partitioner.number_of_rows < window:
                read += partitioner.number_of_rows
                break
            read += window
        if partitions is None:
            partitions = Partitioner((), source.columns, attributes).partition(offset)

    if read != count:
        raise DataSourceError(f"Row source ended after {read} of {count} rows")

    for partition in partitions.values():
        partition.strip(stats)
    return partitions, read
