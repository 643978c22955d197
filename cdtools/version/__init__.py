"""Version algebra and prerelease suffixes.

``manager`` and ``planner`` depend on ``cdtools.state`` and are imported
from their modules directly.
"""

from .semver import (
    BUMP_LEVELS,
    BumpLevel,
    Version,
    VersionFormatError,
    bump_version,
    compare_bump_level,
    format_version,
    parse_version,
)
from .suffix import SuffixStrategy, compute_suffixed_version, next_increment, timestamp_suffix

__all__ = [
    "BUMP_LEVELS",
    "BumpLevel",
    "SuffixStrategy",
    "Version",
    "VersionFormatError",
    "bump_version",
    "compare_bump_level",
    "compute_suffixed_version",
    "format_version",
    "next_increment",
    "parse_version",
    "timestamp_suffix",
]
