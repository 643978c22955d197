"""Version writers for project manifests.

``package.json`` is re-serialized with the indentation and trailing newline
it already had. ``Cargo.toml`` goes through tomlkit so comments and layout
survive the edit.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from cdtools.core.result import Err, Ok, Result
from cdtools.core.structured import as_str_dict, get_str, get_table
from cdtools.platform.files import atomic_write_text
from cdtools.state.model import Project, ProjectType

__all__ = [
    "MANIFEST_FILES",
    "ManifestError",
    "manifest_path",
    "read_manifest_version",
    "update_project_version",
    "update_project_versions",
]

MANIFEST_FILES: dict[ProjectType, str] = {
    "typescript": "package.json",
    "rust": "Cargo.toml",
}

_CARGO_VERSION_LINE = re.compile(r'^(version\s*=\s*)"[^"]*"', re.MULTILINE)
_JSON_INDENT = re.compile(r"^([ \t]+)\S", re.MULTILINE)
_DEFAULT_JSON_INDENT = "  "


@dataclass(frozen=True, slots=True)
class ManifestError:
    message: str
    path: Path | None = None


def manifest_path(root: Path, project: Project) -> Result[Path, ManifestError]:
    filename = MANIFEST_FILES.get(project.type)
    if filename is None:
        return Err(ManifestError(f"unsupported project type: {project.type}"))
    return Ok(root / project.path / filename)


def _read(path: Path) -> Result[str, ManifestError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ManifestError(f"manifest not found: {path}", path=path))
    except OSError as e:
        return Err(ManifestError(f"failed to read {path}: {e}", path=path))


def _write(path: Path, content: str) -> Result[None, ManifestError]:
    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(ManifestError(f"failed to write {path}: {e}", path=path))
    return Ok(None)


def _set_package_json_version(path: Path, text: str, version: str) -> Result[str, ManifestError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ManifestError(f"invalid JSON in {path}: {e}", path=path))
    data = as_str_dict(obj)
    if data is None:
        return Err(ManifestError(f"{path}: expected a JSON object", path=path))
    data["version"] = version
    match = _JSON_INDENT.search(text)
    indent = match.group(1) if match else _DEFAULT_JSON_INDENT
    content = json.dumps(data, indent=indent, ensure_ascii=False)
    return Ok(content + "\n" if text.endswith("\n") else content)


def _set_cargo_version(path: Path, text: str, version: str) -> Result[str, ManifestError]:
    try:
        doc = tomlkit.parse(text)
    except TOMLKitError as e:
        return Err(ManifestError(f"invalid TOML in {path}: {e}", path=path))

    package = doc.get("package")
    if isinstance(package, dict) and "version" in package:
        package["version"] = version
        return Ok(tomlkit.dumps(doc))

    # Workspaces keep the version under [workspace.package] or elsewhere.
    updated, count = _CARGO_VERSION_LINE.subn(rf'\g<1>"{version}"', text, count=1)
    if count == 0:
        return Err(ManifestError(f"no version field in {path}", path=path))
    return Ok(updated)


def update_project_version(root: Path, project: Project, version: str) -> Result[Path, ManifestError]:
    """Rewrite the version field of ``project``'s manifest."""
    path_r = manifest_path(root, project)
    if isinstance(path_r, Err):
        return path_r
    path = path_r.value

    text = _read(path)
    if isinstance(text, Err):
        return text

    if project.type == "typescript":
        content = _set_package_json_version(path, text.value, version)
    else:
        content = _set_cargo_version(path, text.value, version)
    if isinstance(content, Err):
        return content

    written = _write(path, content.value)
    if isinstance(written, Err):
        return written
    return Ok(path)


def update_project_versions(
    root: Path, projects: Iterable[Project], versions: Mapping[str, str]
) -> Result[list[Path], ManifestError]:
    """Update every project that has an entry in ``versions``; stops at the first failure."""
    written: list[Path] = []
    for project in projects:
        version = versions.get(project.path)
        if version is None:
            continue
        result = update_project_version(root, project, version)
        if isinstance(result, Err):
            return result
        written.append(result.value)
    return Ok(written)


def read_manifest_version(path: Path) -> str | None:
    """Version declared in a package.json or Cargo.toml, or None."""
    text = _read(path)
    if isinstance(text, Err):
        return None

    if path.name == "package.json":
        try:
            obj: object = json.loads(text.value)
        except json.JSONDecodeError:
            return None
        data = as_str_dict(obj)
        return get_str(data, "version") if data is not None else None

    try:
        doc = tomlkit.parse(text.value).unwrap()
    except TOMLKitError:
        return None
    package = get_table(doc, "package")
    if package is not None and (version := get_str(package, "version")) is not None:
        return version
    workspace = get_table(doc, "workspace")
    workspace_package = get_table(workspace, "package") if workspace is not None else None
    return get_str(workspace_package, "version") if workspace_package is not None else None
