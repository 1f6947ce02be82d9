"""Command line interface: ``afdclean TABLE.csv -a A,B,C [options]``."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .config import CleanerConfig
from .errors import AfdCleanError
from .lattice import run
from .report import format_report, write_report
from .source import CsvRowSource


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="afdclean",
        description=(
            "Find approximate functional dependencies in a CSV table and the "
            "rows to delete for each of them to hold."
        ),
    )
    parser.add_argument("table", help="CSV file with a header line")
    parser.add_argument(
        "-a",
        "--attributes",
        help="Comma separated attributes to analyse (default: every column); "
        "leave out key columns",
    )
    parser.add_argument(
        "-e", "--epsilon", type=float, default=0.05,
        help="Maximum fraction of rows to delete (default: 0.05)",
    )
    parser.add_argument(
        "-d", "--delta", type=float, default=0.05,
        help="Confidence parameter of the sample size (default: 0.05)",
    )
    parser.add_argument(
        "-s", "--sampled", action="store_true", help="Analyse a sample of the table"
    )
    parser.add_argument(
        "-c", "--chunk-size", type=int, help="Build partitions N rows at a time"
    )
    parser.add_argument("--sep", default=",", help="CSV field separator")
    parser.add_argument(
        "--report-dir", default="reports", help="Directory for the report file"
    )
    parser.add_argument(
        "--no-report", action="store_true", help="Print the report only"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``afdclean`` console script."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger("afdclean").setLevel(logging.DEBUG)

    started = datetime.now()
    try:
        columns = None
        if args.attributes:
            columns = [a.strip() for a in args.attributes.split(",") if a.strip()]
        source = CsvRowSource(args.table, columns, sep=args.sep)
        config = CleanerConfig(
            attributes=source.columns,
            epsilon=args.epsilon,
            delta=args.delta,
            sampled=args.sampled,
            chunk_size=args.chunk_size,
        )
        result = run(source, config)
    except AfdCleanError as exc:
        print(f"afdclean: error: {exc}", file=sys.stderr)
        return 1

    text = format_report(
        result, table=Path(args.table).name, config=config, started=started
    )
    print(text, end="")
    if not args.no_report:
        try:
            path = write_report(text, args.report_dir, timestamp=started)
        except OSError as exc:
            print(f"afdclean: error: cannot write report: {exc}", file=sys.stderr)
            return 1
        print(f"Report written to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
