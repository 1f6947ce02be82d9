"""Type aliases for afdclean.

This module defines type aliases used throughout the package for clarity
and consistency. The actual data structures are in core.py and partition.py.
"""

from collections.abc import Hashable

# Type aliases for attribute and row references
Attribute = str
"""Alias for an attribute (column) name of the analysed table."""

RowId = int
"""Alias for a row identifier.

Row ids are sequential non-negative integers assigned in scan order and
never collide across chunks.
"""

Value = Hashable
"""Alias for a single cell value.

Values are opaque to the algorithm; they only need equality and hashing.
"""
