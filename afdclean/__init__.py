"""afdclean: approximate functional dependencies and the rows that break them.

The afdclean package profiles a table for data-quality problems:
- Level-wise lattice search over attribute sets (stripped partitions)
- For every dependency found, the minimal set of rows to delete
- Sampling and chunked partition construction for large tables
- Row sources for pandas DataFrames and CSV files
- Text reports and pandas summaries
"""

import logging
from importlib import metadata

# Configuration
from .config import CleanerConfig, sample_size

# Core types and data structures
from .core import AttributeSet, Dependency, RunStats

# Errors
from .errors import (
    AfdCleanError,
    ConfigurationError,
    DataSourceError,
    MalformedAttributeSetError,
    RunCancelledError,
)

# Lattice search
from .lattice import CleanerResult, LatticeEngine, discover_dependencies, run
from .partition import EquivalenceClass, Partition
from .partitioner import Partitioner, build_base_partitions

# Reporting
from .report import dependencies_frame, format_report, write_report

# Row sources
from .source import CsvRowSource, DataFrameRowSource, RowSource
from .types import Attribute, RowId

try:
    __version__ = metadata.version("afdclean")
except metadata.PackageNotFoundError:
    # Fallback for development installs
    __version__ = "0.1.0"

__all__ = [
    # Core types
    "Attribute",
    "RowId",
    "AttributeSet",
    "Dependency",
    "RunStats",
    # Partitions
    "EquivalenceClass",
    "Partition",
    "Partitioner",
    "build_base_partitions",
    # Search
    "CleanerConfig",
    "sample_size",
    "LatticeEngine",
    "CleanerResult",
    "run",
    "discover_dependencies",
    # Row sources
    "RowSource",
    "DataFrameRowSource",
    "CsvRowSource",
    # Reporting
    "format_report",
    "write_report",
    "dependencies_frame",
    # Errors
    "AfdCleanError",
    "ConfigurationError",
    "DataSourceError",
    "MalformedAttributeSetError",
    "RunCancelledError",
    # Logging
    "get_logger",
]


# Configure package-wide logging
def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger for the afdclean package.

    Parameters
    ----------
    name : str | None, optional
        Logger name. If None, uses the package name.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    if name is None:
        name = __name__.split(".")[0]
    return logging.getLogger(name)


# Set up default logging configuration
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
