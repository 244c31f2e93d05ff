"""
LittleBT
========

A relational persistence layer for a wide-column (Bigtable style) emulator.
Rows and table metadata live in two SQL relations instead of an in-memory
sorted tree, so emulator state survives restarts.
"""

from littlebt.units.version import get_version

VERSION = (0, 1, 0, "final", 0)

__version__ = get_version(VERSION)

__all__ = ["VERSION", "__version__"]
