"""Prerelease suffix strategies.

A tag's suffix is either a UTC timestamp (``alpha.20240102030405``) or the
next free integer among existing git tags (``rc.3``).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal, TypeAlias

from cdtools.core.result import Err, Result

if TYPE_CHECKING:
    from cdtools.git.repository import GitError
    from cdtools.output.console import ConsoleProtocol

__all__ = [
    "SUFFIX_STRATEGIES",
    "SuffixStrategy",
    "TagLister",
    "compute_suffixed_version",
    "increment_tag_glob",
    "next_increment",
    "timestamp_suffix",
]

SuffixStrategy = Literal["timestamp", "increment"]

SUFFIX_STRATEGIES: tuple[SuffixStrategy, ...] = ("timestamp", "increment")

# Receives a glob such as "*1.0.1-rc.*" and returns matching tag names.
TagLister: TypeAlias = "Callable[[str], Result[list[str], GitError]]"


def timestamp_suffix(now: datetime | None = None) -> str:
    """``YYYYMMDDhhmmss`` in UTC.

    ``now`` defaults to the wall clock; naive datetimes are taken as UTC.
    """
    moment = now if now is not None else datetime.now(UTC)
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return f"{moment.year:04d}{moment:%m%d%H%M%S}"


def next_increment(existing_tags: Iterable[str], base_version: str, tag: str) -> int:
    """Next unused N for ``<base_version>-<tag>.N``.

    Tags may carry a ``<name>-`` prefix (``lib-1.0.0-rc.2``). Non-numeric
    suffixes are ignored. Returns 0 when nothing matches.
    """
    pattern = re.compile(rf"(?:.*-)?{re.escape(base_version)}-{re.escape(tag)}\.([0-9]+)")
    increments = [
        int(m.group(1)) for name in existing_tags if (m := pattern.fullmatch(name)) is not None
    ]
    if not increments:
        return 0
    return max(increments) + 1


def increment_tag_glob(base_version: str, tag: str) -> str:
    return f"*{base_version}-{tag}.*"


def compute_suffixed_version(
    base_version: str,
    tag: str,
    strategy: SuffixStrategy,
    list_tags: TagLister,
    *,
    now: datetime | None = None,
    console: ConsoleProtocol | None = None,
) -> str:
    """``<base_version>-<tag>.<suffix>`` using the tag's strategy.

    For ``increment`` a failed tag lookup is reported as a warning and the
    counter starts at 0.
    """
    if strategy == "timestamp":
        return f"{base_version}-{tag}.{timestamp_suffix(now)}"

    tags = list_tags(increment_tag_glob(base_version, tag))
    if isinstance(tags, Err):
        if console is not None:
            console.warning(
                f"could not check existing tags for {base_version}-{tag}: {tags.error.message}"
            )
        n = 0
    else:
        n = next_increment(tags.value, base_version, tag)
    return f"{base_version}-{tag}.{n}"
