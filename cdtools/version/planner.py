"""Per-project bump selection for push-pr and the end-pr tag transition.

A project is never bumped twice at the same or a lower level within one
release branch: once ``projectUpdated`` shows a level was reached, further
pushes at that level only refresh the prerelease suffix.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Literal

from cdtools.state.model import BranchInfo, Config, Project, is_stable
from cdtools.version.manager import VersionManager
from cdtools.version.semver import (
    BumpLevel,
    bump_rank,
    bump_version,
    compare_bump_level,
    parse_version,
)

__all__ = [
    "BumpChoice",
    "BumpPolicy",
    "ChangeKind",
    "already_released",
    "calculate_new_versions",
    "calculate_transition_versions",
    "classify_changes",
    "determine_projects_to_update",
    "fixed_bump_selections",
    "normalize_path",
    "plan_project_version",
    "resolve_bump_selections",
]

BumpChoice = Literal["skip", "patch", "minor", "major"]
ChangeKind = Literal["direct", "dependency", "none"]


@dataclass(frozen=True, slots=True)
class BumpPolicy:
    """Independent-strategy defaults for projects the user gave no choice for.

    auto_patch_dependency_only: a project whose only changes are in its
        ``deps`` gets a ``patch`` bump.
    """

    auto_patch_dependency_only: bool = True


DEFAULT_BUMP_POLICY = BumpPolicy()


def normalize_path(path: str) -> str:
    """``./packages/a/`` -> ``packages/a``; ``.`` and ``./`` -> ``.``."""
    cleaned = path.replace("\\", "/").strip()
    normalized = str(PurePosixPath(cleaned)) if cleaned else "."
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized or "."


def _is_under(path: str, directory: str) -> bool:
    if directory == ".":
        return True
    return path.startswith(directory + "/")


def classify_changes(config: Config, changed_files: Iterable[str]) -> dict[str, ChangeKind]:
    """How each project is touched by ``changed_files``.

    ``direct``: a file under the project's path changed. ``dependency``: only
    files matching (or under) one of its ``deps`` changed.
    """
    files = [normalize_path(f) for f in changed_files if f.strip()]
    result: dict[str, ChangeKind] = {}
    for project in config.projects:
        root = normalize_path(project.path)
        deps = [normalize_path(d) for d in project.deps]

        if any(_is_under(f, root) for f in files):
            result[project.path] = "direct"
        elif any(f == dep or _is_under(f, dep) for f in files for dep in deps):
            result[project.path] = "dependency"
        else:
            result[project.path] = "none"
    return result


def determine_projects_to_update(
    config: Config, changed_files: Iterable[str], new_versions: Mapping[str, str]
) -> list[str]:
    """Project paths whose manifests must be rewritten, in config order.

    Fixed strategy: one affected project pulls in every project with a new
    version.
    """
    kinds = classify_changes(config, changed_files)
    affected = {path for path, kind in kinds.items() if kind != "none"}

    if config.versioning_strategy == "fixed" and affected:
        affected.update(new_versions)

    ordered = [p.path for p in config.projects if p.path in affected]
    ordered.extend(sorted(path for path in affected if path not in ordered))
    return ordered


def fixed_bump_selections(config: Config, level: BumpLevel) -> dict[str, BumpLevel]:
    return {project.path: level for project in config.projects}


def resolve_bump_selections(
    config: Config,
    choices: Mapping[str, BumpChoice | None],
    *,
    dependency_only: Collection[str] = (),
    policy: BumpPolicy = DEFAULT_BUMP_POLICY,
) -> dict[str, BumpLevel]:
    """Turn per-project answers into bump levels.

    An explicit choice always wins and ``skip`` drops the project. With no
    choice (None or absent) a project gets ``patch`` only when it is listed
    in ``dependency_only`` and the policy allows it.
    """
    result: dict[str, BumpLevel] = {}
    for project in config.projects:
        choice = choices.get(project.path)
        if choice == "skip":
            continue
        if choice is not None:
            result[project.path] = choice
        elif policy.auto_patch_dependency_only and project.path in dependency_only:
            result[project.path] = "patch"
    return result


def already_released(project: Project, current_version: str | None, level: BumpLevel) -> bool:
    """True when ``level`` (or higher) was already applied in this cycle."""
    if current_version is None:
        return False
    released = compare_bump_level(project.base_version, current_version)
    return released is not None and bump_rank(released) >= bump_rank(level)


def plan_project_version(
    manager: VersionManager,
    project: Project,
    level: BumpLevel,
    *,
    tag: str,
    current_version: str | None,
) -> str:
    if is_stable(tag):
        return bump_version(project.base_version, level)

    if already_released(project, current_version, level):
        if current_version is not None:
            return manager.suffixed(parse_version(current_version), tag)
        return manager.suffixed(parse_version(project.base_version), tag)

    return manager.suffixed(parse_version(project.base_version).bump(level), tag)


def calculate_new_versions(
    manager: VersionManager,
    branch_info: BranchInfo,
    selections: Mapping[str, BumpLevel],
) -> dict[str, str]:
    """New version per selected project, in config order.

    Raises:
        VersionManagerError: If the branch's tag is not configured.
    """
    manager.tag_config(branch_info.tag)

    result: dict[str, str] = {}
    for project in manager.config.projects:
        level = selections.get(project.path)
        if level is None:
            continue
        result[project.path] = plan_project_version(
            manager,
            project,
            level,
            tag=branch_info.tag,
            current_version=branch_info.current_version(project.path),
        )
    return result


def calculate_transition_versions(
    manager: VersionManager, branch_info: BranchInfo
) -> dict[str, str]:
    """Versions for every project bumped on this branch, moved to the next tag."""
    if not branch_info.project_updated:
        return {}

    result: dict[str, str] = {}
    for project in manager.config.projects:
        current = branch_info.current_version(project.path)
        if current is None:
            continue
        result[project.path] = manager.calculate_next_tag_version(
            branch_info.tag, project, current
        )
    return result
