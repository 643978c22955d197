"""Version algebra: ``major.minor.patch[-prerelease]``.

Only the subset cd-tools needs: a numeric triple plus one opaque prerelease
string (usually ``<tag>.<suffix>``). No build metadata, no precedence rules
for prerelease identifiers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal

__all__ = [
    "BUMP_LEVELS",
    "BumpLevel",
    "Version",
    "VersionFormatError",
    "bump_rank",
    "bump_version",
    "compare_bump_level",
    "format_version",
    "parse_version",
]

BumpLevel = Literal["patch", "minor", "major"]

BUMP_LEVELS: tuple[BumpLevel, ...] = ("patch", "minor", "major")

_VERSION_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)(?:-(.+))?", re.DOTALL)


class VersionFormatError(ValueError):
    """Raised when a string is not ``X.Y.Z`` or ``X.Y.Z-prerelease``."""

    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid version format: {version}")
        self.version = version


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def core(self) -> Version:
        """The numeric triple with the prerelease dropped."""
        return Version(self.major, self.minor, self.patch)

    def with_prerelease(self, prerelease: str) -> Version:
        return replace(self, prerelease=prerelease)

    def bump(self, level: BumpLevel) -> Version:
        """Bump one component; the result never carries a prerelease."""
        match level:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump level: {level}")

    def __str__(self) -> str:
        return format_version(self)


def parse_version(version: str) -> Version:
    """Parse ``X.Y.Z`` or ``X.Y.Z-prerelease``.

    Raises:
        VersionFormatError: If ``version`` does not match the pattern.
    """
    m = _VERSION_RE.fullmatch(version)
    if m is None:
        raise VersionFormatError(version)
    return Version(
        major=int(m.group(1)),
        minor=int(m.group(2)),
        patch=int(m.group(3)),
        prerelease=m.group(4),
    )


def format_version(version: Version) -> str:
    base = f"{version.major}.{version.minor}.{version.patch}"
    if version.prerelease:
        return f"{base}-{version.prerelease}"
    return base


def bump_version(version: str, level: BumpLevel) -> str:
    """``bump_version("1.0.1-alpha.2", "minor") == "1.1.0"``."""
    return format_version(parse_version(version).bump(level))


def bump_rank(level: BumpLevel) -> int:
    """Order bump levels: patch < minor < major."""
    return BUMP_LEVELS.index(level)


def compare_bump_level(base_version: str, candidate_version: str) -> BumpLevel | None:
    """Infer which bump took ``base_version`` to ``candidate_version``.

    The candidate's prerelease is ignored. Components are checked in order
    major, minor, patch and the first one where the candidate is greater
    wins. Returns None when no component is greater, including equality.
    """
    base = parse_version(base_version)
    candidate = parse_version(candidate_version).core

    if candidate.major > base.major:
        return "major"
    if candidate.minor > base.minor:
        return "minor"
    if candidate.patch > base.patch:
        return "patch"
    return None
