"""
Version utility functions for LittleBT.

Version tuples have the shape (major, minor, micro, releaselevel, serial).
"""

from typing import Tuple

VersionTuple = Tuple[int, int, int, str, int]


def get_version(version: VersionTuple) -> str:
    """
    Return a PEP 440-compliant version string.

    Args:
        version: Version tuple (major, minor, micro, releaselevel, serial)

    Returns:
        Version string such as "0.1.0", "0.2.0.dev3" or "1.0.0-rc1"
    """
    major, minor, micro, releaselevel, serial = version

    version_str = f"{major}.{minor}"
    if micro is not None:
        version_str += f".{micro}"

    if releaselevel != "final":
        if releaselevel == "dev":
            version_str += ".dev"
        else:
            version_str += f"-{releaselevel}"
        if serial > 0:
            version_str += str(serial)

    return version_str
