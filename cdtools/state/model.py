"""Release state model.

``Config`` is the long-lived release policy (``.cdtools/config.json``).
``BranchInfo`` is the per-release-branch ledger of which projects were bumped
to which version during the current cycle.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import PurePosixPath
from typing import Final, Literal

from cdtools.version.suffix import SuffixStrategy

__all__ = [
    "STABLE_TAG",
    "BranchInfo",
    "Config",
    "Project",
    "ProjectType",
    "ProjectUpdate",
    "Registry",
    "ReleaseBranch",
    "ReleaseNotes",
    "VersionTagConfig",
    "VersioningStrategy",
    "available_tags",
    "branch_info_filename",
    "escape_branch_slug",
    "find_tag_chain_problem",
    "format_timestamp",
    "is_stable",
    "merge_project_updated",
    "parse_branch_name",
    "resolve_tag_config",
]

# Reserved terminal tag. Always selectable, even when absent from versionTags,
# and never carries a prerelease suffix.
STABLE_TAG: Final = "stable"

VersioningStrategy = Literal["fixed", "independent"]
ProjectType = Literal["typescript", "rust"]
Registry = Literal["npm", "crates", "docker"]

_BRANCH_RE = re.compile(r"(.+)\(([^)]+)\)", re.DOTALL)
_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\:*?"<>|]')


@dataclass(frozen=True, slots=True)
class VersionTagConfig:
    name: str
    version_suffix_strategy: SuffixStrategy = "timestamp"
    next: str | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A versioned sub-project.

    ``base_version`` is the last stable release; it only moves when a stable
    release is finalized. Changes to any path in ``deps`` trigger a bump even
    without changes under ``path``.
    """

    path: str
    type: ProjectType
    base_version: str
    deps: tuple[str, ...] = ()
    registries: tuple[Registry, ...] = ()

    @property
    def name(self) -> str:
        parts = PurePosixPath(self.path).parts
        return parts[-1] if parts and parts[-1] not in (".", "/") else self.path


@dataclass(frozen=True, slots=True)
class ReleaseNotes:
    enabled: bool
    template: str


@dataclass(frozen=True, slots=True)
class Config:
    versioning_strategy: VersioningStrategy
    version_tags: tuple[VersionTagConfig, ...]
    projects: tuple[Project, ...]
    release_notes: ReleaseNotes | None = None

    def project(self, path: str) -> Project | None:
        for project in self.projects:
            if project.path == path:
                return project
        return None

    def with_base_versions(self, versions: Mapping[str, str]) -> Config:
        """Copy with ``base_version`` replaced for the given project paths."""
        projects = tuple(
            replace(p, base_version=versions[p.path]) if p.path in versions else p
            for p in self.projects
        )
        return replace(self, projects=projects)


@dataclass(frozen=True, slots=True)
class ProjectUpdate:
    version: str
    updated_at: str  # ISO-8601 UTC, e.g. 2023-12-25T10:30:45.123Z


@dataclass(frozen=True, slots=True)
class BranchInfo:
    tag: str
    parent_branch: str
    project_updated: Mapping[str, ProjectUpdate] | None = None

    def current_version(self, project_path: str) -> str | None:
        if not self.project_updated:
            return None
        entry = self.project_updated.get(project_path)
        return entry.version if entry is not None else None


@dataclass(frozen=True, slots=True)
class ReleaseBranch:
    """A branch named ``<slug>(<tag>)``."""

    slug: str
    tag: str

    @property
    def full_name(self) -> str:
        return f"{self.slug}({self.tag})"


def is_stable(tag: str) -> bool:
    return tag == STABLE_TAG


def resolve_tag_config(config: Config, tag: str) -> VersionTagConfig | None:
    """Look up a tag; ``stable`` resolves even when not configured."""
    for tag_config in config.version_tags:
        if tag_config.name == tag:
            return tag_config
    if is_stable(tag):
        # Strategy is irrelevant: stable versions carry no suffix.
        return VersionTagConfig(name=STABLE_TAG, version_suffix_strategy="increment")
    return None


def available_tags(config: Config) -> list[str]:
    """Configured tags in declaration order, then ``stable`` if missing."""
    tags: list[str] = []
    for tag_config in config.version_tags:
        if tag_config.name not in tags:
            tags.append(tag_config.name)
    if STABLE_TAG not in tags:
        tags.append(STABLE_TAG)
    return tags


def find_tag_chain_problem(version_tags: tuple[VersionTagConfig, ...]) -> str | None:
    """Return a description of a broken ``next`` chain, or None if sound.

    Every ``next`` must name a configured tag or ``stable``, and following
    ``next`` from any tag must terminate.
    """
    by_name = {t.name: t for t in version_tags}
    for tag_config in version_tags:
        if tag_config.next is not None and tag_config.next not in by_name:
            if not is_stable(tag_config.next):
                return f"tag '{tag_config.name}' has unknown next tag '{tag_config.next}'"

    for start in version_tags:
        seen = [start.name]
        current = start
        while current.next is not None and current.next in by_name:
            if current.next in seen:
                chain = " -> ".join([*seen, current.next])
                return f"cycle in version tag chain: {chain}"
            seen.append(current.next)
            current = by_name[current.next]
    return None


def parse_branch_name(full_name: str) -> ReleaseBranch | None:
    """``"feat/foo(alpha)"`` -> ``ReleaseBranch("feat/foo", "alpha")``.

    Returns None for branch names without a trailing ``(<tag>)``.
    """
    m = _BRANCH_RE.fullmatch(full_name)
    if m is None:
        return None
    return ReleaseBranch(slug=m.group(1), tag=m.group(2))


def escape_branch_slug(slug: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("-", slug)


def branch_info_filename(branch: ReleaseBranch) -> str:
    return f"{branch.tag}-{escape_branch_slug(branch.slug)}.json"


def format_timestamp(now: datetime) -> str:
    moment = now.astimezone(UTC) if now.tzinfo is not None else now.replace(tzinfo=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def merge_project_updated(
    previous: Mapping[str, ProjectUpdate] | None,
    new_versions: Mapping[str, str],
    now: datetime,
) -> dict[str, ProjectUpdate]:
    """Build the ledger for ``new_versions``.

    ``updated_at`` is kept when a project's version string did not change and
    set to ``now`` otherwise. Paths absent from ``new_versions`` are dropped.
    """
    stamp = format_timestamp(now)
    merged: dict[str, ProjectUpdate] = {}
    for path, version in new_versions.items():
        prior = previous.get(path) if previous else None
        if prior is not None and prior.version == version:
            merged[path] = prior
        else:
            merged[path] = ProjectUpdate(version=version, updated_at=stamp)
    return merged
