"""Human-readable reports of a discovery run.

The text report has three blocks: general information, run statistics and
the accepted dependencies with the rows each one needs deleted. Reports can
be written to a ``reports`` directory under a timestamped file name, and a
pandas summary table is available for interactive use.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pandas as pd

from .config import CleanerConfig
from .lattice import CleanerResult

RULE = "="


def _header(title: str) -> str:
    return f"{RULE * 16} {title} {RULE * 12}\n"


def format_report(
    result: CleanerResult,
    *,
    table: str | None = None,
    config: CleanerConfig | None = None,
    started: datetime | None = None,
) -> str:
    """Render the text report of a run.

    Parameters
    ----------
    result : CleanerResult
        The run outcome
    table : str, optional
        Name of the analysed table, shown in the statistics block
    config : CleanerConfig, optional
        Options of the run; without it chunking and tolerances are omitted
    started : datetime, optional
        Shown as the report date. Defaults to now

    Returns
    -------
    str
        The report text
    """
    started = started or datetime.now()
    lines = [_header("General"), f"Date: {started:%Y-%m-%d %H:%M:%S}\n"]

    lines.append(_header("Statistics"))
    lines.append(f"Time elapsed: {result.elapsed * 1000:.0f} ms\n")
    lines.append(f"Number of rows: {result.table_rows}\n")
    sample = result.sample_size if result.sample_size is not None else "not sampled"
    lines.append(f"Sample size: {sample}\n")
    if config is not None:
        chunks = config.chunk_size if config.chunked else "not chunked"
        lines.append(f"Chunk size: {chunks}\n")
    if table is not None:
        lines.append(f"Table: {table}\n")
    lines.append(f"Attribute count: {len(result.attribute_order)}\n")
    if config is not None:
        lines.append(f"Epsilon: {config.epsilon}\n")
        lines.append(f"Delta: {config.delta}\n")
    if result.excluded_keys:
        lines.append(f"Key attributes: {', '.join(result.excluded_keys)}\n")
    lines.append(f"Possible dependencies: {result.stats.possible_checks}\n")
    lines.append(f"Dependencies checked: {result.stats.performed_checks}\n")
    lines.append(f"Dependencies found: {len(result.dependencies)}\n")

    if result.dependencies:
        lines.append(_header("Dependencies"))
        for dep in result.dependencies:
            rows = sorted(dep.violating_rows)
            lines.append(f"Dependency: {dep.key}\n")
            lines.append(f"To delete ({len(rows)}): {rows}\n")

    return "".join(lines)


def write_report(
    text: str,
    directory: str | os.PathLike = "reports",
    *,
    timestamp: datetime | None = None,
) -> Path:
    """Write ``text`` to ``directory/report-<yyyyMMdd-HHmm>.report``.

    The directory is created when missing.

    Returns
    -------
    Path
        The written file
    """
    timestamp = timestamp or datetime.now()
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    path = target / f"report-{timestamp:%Y%m%d-%H%M}.report"
    path.write_text(text, encoding="utf-8")
    return path


def dependencies_frame(result: CleanerResult) -> pd.DataFrame:
    """One row per dependency with its violation count and ratio.

    Returns
    -------
    pd.DataFrame
        Columns ``dependency, lhs, rhs, violations, ratio, exact``
    """
    records = [
        {
            "dependency": dep.key,
            "lhs": dep.lhs.key,
            "rhs": dep.rhs,
            "violations": dep.violation_count,
            "ratio": dep.violation_ratio(result.total_rows),
            "exact": dep.is_exact,
        }
        for dep in result.dependencies
    ]
    return pd.DataFrame(
        records, columns=["dependency", "lhs", "rhs", "violations", "ratio", "exact"]
    )
