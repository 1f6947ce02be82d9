"""Row sources: where the lattice search gets its rows from.

A row source knows its column names and row count and can stream rows,
either all of them or a contiguous ``[offset, offset + count)`` window.
Chunked partitioning and sampling both rely on windows. Rows are tuples of
cell values in column order; missing values are normalized to ``None`` so
that they fall into one equivalence class.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
import pandas as pd

from .errors import DataSourceError
from .types import Attribute, Value

_READ_ERRORS = (
    OSError,
    UnicodeDecodeError,
    pd.errors.ParserError,
    pd.errors.EmptyDataError,
)


@runtime_checkable
class RowSource(Protocol):
    """Streaming access to the rows of a table."""

    columns: list[Attribute]

    def row_count(self) -> int:
        """Total number of rows."""
        ...

    def rows(self, offset: int = 0, count: int | None = None) -> Iterator[tuple]:
        """Yield rows ``offset`` .. ``offset + count - 1`` (to the end if None)."""
        ...


def normalize_value(value: Any) -> Value:
    """Make a cell value usable as an equivalence class key.

    Missing markers (NaN, NaT, pd.NA) become ``None``, numpy scalars become
    Python scalars, lists and arrays become tuples and sets become frozensets.

    Raises
    ------
    DataSourceError
        If the value still cannot be hashed (e.g. a dict cell).
    """
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, (list, np.ndarray)):
        return tuple(normalize_value(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(normalize_value(v) for v in value)
    if isinstance(value, tuple):
        return value
    try:
        hash(value)
    except TypeError as exc:
        raise DataSourceError(
            f"Cell value of type {type(value).__name__} cannot be grouped"
        ) from exc
    if pd.isna(value):
        return None
    return value


def _check_window(offset: int, count: int | None) -> None:
    if offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    if count is not None and count < 0:
        raise ValueError(f"count must be non-negative, got {count}")


class DataFrameRowSource:
    """Row source over an in-memory pandas DataFrame.

    Parameters
    ----------
    frame : pd.DataFrame
        The table
    columns : Sequence[Attribute], optional
        Columns to expose, in order. If None, use all columns
    """

    def __init__(
        self, frame: pd.DataFrame, columns: Sequence[Attribute] | None = None
    ) -> None:
        if not isinstance(frame, pd.DataFrame):
            raise DataSourceError(f"Expected a DataFrame, got {type(frame).__name__}")
        self.columns = [str(c) for c in (columns if columns is not None else frame.columns)]
        frame = frame.rename(columns=str)
        missing = [c for c in self.columns if c not in frame.columns]
        if missing:
            raise DataSourceError(f"Columns not in frame: {missing}")
        self._values = frame[self.columns].to_numpy(dtype=object)

    def row_count(self) -> int:
        return int(self._values.shape[0])

    def rows(self, offset: int = 0, count: int | None = None) -> Iterator[tuple]:
        _check_window(offset, count)
        stop = None if count is None else offset + count
        for raw in self._values[offset:stop]:
            yield tuple(normalize_value(v) for v in raw)


class CsvRowSource:
    """Row source streaming a CSV file with pandas.

    Only the requested window is read, ``read_chunksize`` rows at a time, so
    chunked runs never hold more than one window of raw rows.

    Parameters
    ----------
    path : str or os.PathLike
        CSV file with a header line
    columns : Sequence[Attribute], optional
        Columns to expose, in order. If None, use all columns
    read_chunksize : int, default 10000
        Rows per ``read_csv`` chunk
    **read_csv_kwargs
        Extra arguments for :func:`pandas.read_csv` (``sep``, ``dtype``, ...)
    """

    def __init__(
        self,
        path: str | os.PathLike,
        columns: Sequence[Attribute] | None = None,
        *,
        read_chunksize: int = 10000,
        **read_csv_kwargs: Any,
    ) -> None:
        if read_chunksize <= 0:
            raise ValueError(f"read_chunksize must be positive, got {read_chunksize}")
        self.path = path
        self.read_chunksize = read_chunksize
        self._kwargs = read_csv_kwargs
        header = self._read(nrows=0)
        available = [str(c) for c in header.columns]
        self.columns = list(columns) if columns is not None else available
        missing = [c for c in self.columns if c not in available]
        if missing:
            raise DataSourceError(f"Columns not in {path}: {missing}")
        self._row_count: int | None = None

    def _read(self, **kwargs: Any):
        try:
            return pd.read_csv(self.path, **{**self._kwargs, **kwargs})
        except _READ_ERRORS as exc:
            raise DataSourceError(f"Cannot read {self.path}: {exc}") from exc

    def row_count(self) -> int:
        if self._row_count is None:
            total = 0
            reader = self._read(usecols=self.columns, chunksize=self.read_chunksize)
            try:
                for chunk in reader:
                    total += len(chunk)
            except _READ_ERRORS as exc:
                raise DataSourceError(f"Cannot read {self.path}: {exc}") from exc
            self._row_count = total
        return self._row_count

    def rows(self, offset: int = 0, count: int | None = None) -> Iterator[tuple]:
        _check_window(offset, count)
        if count == 0:
            return
        reader = self._read(
            usecols=self.columns,
            skiprows=range(1, offset + 1),
            nrows=count,
            chunksize=self.read_chunksize,
            dtype=self._kwargs.get("dtype", object),
        )
        try:
            for chunk in reader:
                values = chunk[self.columns].to_numpy(dtype=object)
                for raw in values:
                    yield tuple(normalize_value(v) for v in raw)
        except _READ_ERRORS as exc:
            raise DataSourceError(f"Cannot read {self.path}: {exc}") from exc
