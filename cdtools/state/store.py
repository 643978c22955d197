"""Persistence for ``.cdtools/config.json`` and per-branch ledgers.

Every file is tab-indented JSON with a trailing newline, written atomically.
The tool assumes one invocation at a time: there is no locking and the last
writer wins.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import cast, get_args

from cdtools.core.result import Err, Ok, Result
from cdtools.core.structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_str_list,
    get_table,
)
from cdtools.platform.files import write_json
from cdtools.state.model import (
    BranchInfo,
    Config,
    Project,
    ProjectType,
    ProjectUpdate,
    Registry,
    ReleaseBranch,
    ReleaseNotes,
    VersionTagConfig,
    VersioningStrategy,
    branch_info_filename,
    find_tag_chain_problem,
    parse_branch_name,
)
from cdtools.version.suffix import SUFFIX_STRATEGIES, SuffixStrategy

__all__ = [
    "CDTOOLS_DIR",
    "CONFIG_FILENAME",
    "NotFoundError",
    "StateError",
    "ValidationError",
    "WriteError",
    "branch_info_path",
    "branch_info_to_json",
    "config_path",
    "config_to_json",
    "create_branch_info",
    "delete_branch_info",
    "is_initialized",
    "load_branch_info",
    "load_config",
    "parse_branch_info",
    "parse_config",
    "save_branch_info",
    "save_config",
    "update_branch_info",
]

CDTOOLS_DIR = ".cdtools"
CONFIG_FILENAME = "config.json"

_BASE_VERSION_RE = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


@dataclass(frozen=True, slots=True)
class NotFoundError:
    """An expected state file (config, branch ledger) is absent."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A state file exists but does not match the schema."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class WriteError:
    message: str
    path: Path | None = None


StateError = NotFoundError | ValidationError | WriteError


# -----------------------------------------------------------------------------
# Paths
# -----------------------------------------------------------------------------


def config_path(root: Path) -> Path:
    return root / CDTOOLS_DIR / CONFIG_FILENAME


def is_initialized(root: Path) -> bool:
    return config_path(root).is_file()


def branch_info_path(root: Path, branch: ReleaseBranch) -> Path:
    return root / CDTOOLS_DIR / branch_info_filename(branch)


def _read_json(path: Path, *, what: str) -> Result[object, StateError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(NotFoundError(f"{what} not found: {path}", path=path))
    except OSError as e:
        return Err(ValidationError(f"failed to read {what}: {e}", path=path))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ValidationError(f"invalid JSON in {what}: {e}", path=path))
    return Ok(obj)


def _write(path: Path, data: object, *, what: str) -> Result[None, StateError]:
    try:
        write_json(path, data)
    except OSError as e:
        return Err(WriteError(f"failed to write {what}: {e}", path=path))
    return Ok(None)


# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------


def _parse_version_tags(
    items: list[object], path: Path | None
) -> Result[tuple[VersionTagConfig, ...], ValidationError]:
    tags: list[VersionTagConfig] = []
    for item in items:
        record = as_str_dict(item)
        if record is None:
            return Err(ValidationError("versionTags entries must be objects", path=path))
        for name, body_obj in record.items():
            body = as_str_dict(body_obj)
            if body is None:
                return Err(ValidationError(f"versionTags.{name} must be an object", path=path))

            strategy = get_str(body, "versionSuffixStrategy") or "timestamp"
            if strategy not in SUFFIX_STRATEGIES:
                return Err(
                    ValidationError(
                        f"versionTags.{name}.versionSuffixStrategy must be one of "
                        f"{', '.join(SUFFIX_STRATEGIES)} (got {strategy!r})",
                        path=path,
                    )
                )
            next_obj = body.get("next")
            if next_obj is not None and not isinstance(next_obj, str):
                return Err(ValidationError(f"versionTags.{name}.next must be a string", path=path))

            tags.append(
                VersionTagConfig(
                    name=name,
                    version_suffix_strategy=cast(SuffixStrategy, strategy),
                    next=get_str(body, "next"),
                )
            )
    return Ok(tuple(tags))


def _parse_project(item: object, index: int, path: Path | None) -> Result[Project, ValidationError]:
    where = f"projects[{index}]"
    data = as_str_dict(item)
    if data is None:
        return Err(ValidationError(f"{where} must be an object", path=path))

    project_path = get_str(data, "path")
    if project_path is None:
        return Err(ValidationError(f"{where}.path is required", path=path))

    project_type = get_str(data, "type")
    if project_type not in get_args(ProjectType):
        return Err(
            ValidationError(f"{where}.type must be typescript or rust (got {project_type!r})", path=path)
        )

    base_version = get_str(data, "baseVersion")
    if base_version is None or _BASE_VERSION_RE.fullmatch(base_version) is None:
        return Err(
            ValidationError(
                f"{where}.baseVersion must be a semantic version X.Y.Z (got {base_version!r})",
                path=path,
            )
        )

    deps: list[str] = []
    if "deps" in data:
        parsed_deps = get_str_list(data, "deps")
        if parsed_deps is None:
            return Err(ValidationError(f"{where}.deps must be a list of paths", path=path))
        deps = parsed_deps

    registries: list[str] = []
    if "registries" in data:
        parsed_registries = get_str_list(data, "registries")
        if parsed_registries is None:
            return Err(ValidationError(f"{where}.registries must be a list", path=path))
        registries = parsed_registries
    for registry in registries:
        if registry not in get_args(Registry):
            return Err(ValidationError(f"{where}.registries: unknown registry {registry!r}", path=path))

    return Ok(
        Project(
            path=project_path,
            type=cast(ProjectType, project_type),
            base_version=base_version,
            deps=tuple(deps),
            registries=tuple(cast(Registry, r) for r in registries),
        )
    )


def parse_config(obj: object, path: Path | None = None) -> Result[Config, ValidationError]:
    """Validate parsed JSON into a Config."""
    data = as_str_dict(obj)
    if data is None:
        return Err(ValidationError("config root must be a JSON object", path=path))

    strategy = get_str(data, "versioningStrategy")
    if strategy not in get_args(VersioningStrategy):
        return Err(
            ValidationError(
                f"versioningStrategy must be fixed or independent (got {strategy!r})",
                path=path,
            )
        )

    tag_items = get_list(data, "versionTags")
    if tag_items is None:
        return Err(ValidationError("versionTags must be a list", path=path))
    tags = _parse_version_tags(tag_items, path)
    if isinstance(tags, Err):
        return tags
    problem = find_tag_chain_problem(tags.value)
    if problem is not None:
        return Err(ValidationError(problem, path=path))

    project_items = get_list(data, "projects")
    if project_items is None:
        return Err(ValidationError("projects must be a list", path=path))
    projects: list[Project] = []
    for index, item in enumerate(project_items):
        project = _parse_project(item, index, path)
        if isinstance(project, Err):
            return project
        projects.append(project.value)

    release_notes: ReleaseNotes | None = None
    if "releaseNotes" in data:
        notes = get_table(data, "releaseNotes")
        enabled = get_bool(notes, "enabled") if notes is not None else None
        if notes is None or enabled is None:
            return Err(ValidationError("releaseNotes must be {enabled, template}", path=path))
        template = notes.get("template")
        release_notes = ReleaseNotes(
            enabled=enabled,
            template=template if isinstance(template, str) else "",
        )

    return Ok(
        Config(
            versioning_strategy=cast(VersioningStrategy, strategy),
            version_tags=tags.value,
            projects=tuple(projects),
            release_notes=release_notes,
        )
    )


def config_to_json(config: Config) -> StrDict:
    tags: list[object] = []
    for tag in config.version_tags:
        body: StrDict = {"versionSuffixStrategy": tag.version_suffix_strategy}
        if tag.next is not None:
            body["next"] = tag.next
        tags.append({tag.name: body})

    data: StrDict = {
        "versioningStrategy": config.versioning_strategy,
        "versionTags": tags,
        "projects": [
            {
                "path": p.path,
                "type": p.type,
                "baseVersion": p.base_version,
                "deps": list(p.deps),
                "registries": list(p.registries),
            }
            for p in config.projects
        ],
    }
    if config.release_notes is not None:
        data["releaseNotes"] = {
            "enabled": config.release_notes.enabled,
            "template": config.release_notes.template,
        }
    return data


def load_config(root: Path) -> Result[Config, StateError]:
    """Load and validate ``<root>/.cdtools/config.json``."""
    path = config_path(root)
    obj = _read_json(path, what="configuration file")
    if isinstance(obj, Err):
        return obj
    return parse_config(obj.value, path)


def save_config(root: Path, config: Config) -> Result[None, StateError]:
    return _write(config_path(root), config_to_json(config), what="configuration file")


# -----------------------------------------------------------------------------
# Branch info
# -----------------------------------------------------------------------------


def parse_branch_info(obj: object, path: Path | None = None) -> Result[BranchInfo, ValidationError]:
    data = as_str_dict(obj)
    if data is None:
        return Err(ValidationError("branch info root must be a JSON object", path=path))

    tag = get_str(data, "tag")
    parent = get_str(data, "parentBranch")
    if tag is None or parent is None:
        return Err(ValidationError("branch info requires tag and parentBranch", path=path))

    updated: dict[str, ProjectUpdate] | None = None
    raw = data.get("projectUpdated")
    if raw is not None:
        table = as_str_dict(raw)
        if table is None:
            return Err(ValidationError("projectUpdated must be an object", path=path))
        updated = {}
        for project_path, entry_obj in table.items():
            entry = as_str_dict(entry_obj)
            version = get_str(entry, "version") if entry is not None else None
            updated_at = get_str(entry, "updatedAt") if entry is not None else None
            if version is None or updated_at is None:
                return Err(
                    ValidationError(
                        f"projectUpdated.{project_path} requires version and updatedAt",
                        path=path,
                    )
                )
            updated[project_path] = ProjectUpdate(version=version, updated_at=updated_at)

    return Ok(BranchInfo(tag=tag, parent_branch=parent, project_updated=updated))


def branch_info_to_json(info: BranchInfo) -> StrDict:
    data: StrDict = {"tag": info.tag, "parentBranch": info.parent_branch}
    if info.project_updated is not None:
        data["projectUpdated"] = {
            path: {"version": entry.version, "updatedAt": entry.updated_at}
            for path, entry in info.project_updated.items()
        }
    return data


def _release_branch(current_branch: str) -> Result[ReleaseBranch, StateError]:
    branch = parse_branch_name(current_branch)
    if branch is None:
        return Err(
            NotFoundError(
                f"branch '{current_branch}' is not a release branch (expected '<name>(<tag>)')"
            )
        )
    return Ok(branch)


def create_branch_info(
    root: Path, branch: ReleaseBranch, parent_branch: str
) -> Result[BranchInfo, StateError]:
    """Write a fresh ledger with no ``projectUpdated``."""
    info = BranchInfo(tag=branch.tag, parent_branch=parent_branch)
    written = _write(branch_info_path(root, branch), branch_info_to_json(info), what="branch info")
    if isinstance(written, Err):
        return written
    return Ok(info)


def load_branch_info(root: Path, current_branch: str) -> Result[BranchInfo, StateError]:
    branch = _release_branch(current_branch)
    if isinstance(branch, Err):
        return branch
    path = branch_info_path(root, branch.value)
    obj = _read_json(path, what="branch info")
    if isinstance(obj, Err):
        return obj
    return parse_branch_info(obj.value, path)


def save_branch_info(root: Path, current_branch: str, info: BranchInfo) -> Result[None, StateError]:
    branch = _release_branch(current_branch)
    if isinstance(branch, Err):
        return branch
    return _write(branch_info_path(root, branch.value), branch_info_to_json(info), what="branch info")


def update_branch_info(
    root: Path,
    current_branch: str,
    project_updated: dict[str, ProjectUpdate],
    tag: str | None = None,
) -> Result[BranchInfo, StateError]:
    """Replace ``projectUpdated`` (and optionally the tag) of the branch ledger."""
    loaded = load_branch_info(root, current_branch)
    if isinstance(loaded, Err):
        return loaded

    info = replace(loaded.value, project_updated=project_updated)
    if tag:
        info = replace(info, tag=tag)

    saved = save_branch_info(root, current_branch, info)
    if isinstance(saved, Err):
        return saved
    return Ok(info)


def delete_branch_info(root: Path, current_branch: str) -> Result[Path, StateError]:
    branch = _release_branch(current_branch)
    if isinstance(branch, Err):
        return branch
    path = branch_info_path(root, branch.value)
    try:
        path.unlink()
    except FileNotFoundError:
        return Err(NotFoundError(f"branch info not found: {path}", path=path))
    except OSError as e:
        return Err(WriteError(f"failed to delete branch info: {e}", path=path))
    return Ok(path)
