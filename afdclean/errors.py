"""Exceptions raised by afdclean."""


class AfdCleanError(Exception):
    """Base class for every error raised by the package."""


class ConfigurationError(AfdCleanError, ValueError):
    """Invalid run configuration, rejected before any row is read."""


class DataSourceError(AfdCleanError, RuntimeError):
    """The row source could not be read or ended unexpectedly."""


class MalformedAttributeSetError(AfdCleanError, ValueError):
    """An attribute set or dependency key could not be interpreted.

    Inside the lattice search this signals a bug in the algorithm rather
    than bad input, so it is never swallowed.
    """


class RunCancelledError(AfdCleanError):
    """The caller asked the lattice search to stop between two levels."""
