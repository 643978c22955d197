"""Tests for cdtools.manifest.updater."""

from __future__ import annotations

import json
from pathlib import Path

from cdtools.core.result import Err, Ok
from cdtools.manifest.updater import (
    read_manifest_version,
    update_project_version,
    update_project_versions,
)
from cdtools.state.model import Project

CARGO = """\
# core crate
[package]
name = "core"
version = "0.3.2"  # bumped by cd-tools
edition = "2021"

[dependencies]
serde = { version = "1.0", features = ["derive"] }
"""


def _package_json(root: Path, rel: str, data: dict[str, object]) -> Path:
    path = root / rel / "package.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


class TestPackageJson:
    def test_keeps_tab_indentation(self, tmp_path: Path) -> None:
        path = tmp_path / "web" / "package.json"
        path.parent.mkdir()
        path.write_text('{\n\t"name": "web",\n\t"version": "1.0.0",\n\t"private": true\n}\n', encoding="utf-8")
        project = Project(path="web", type="typescript", base_version="1.0.0")

        result = update_project_version(tmp_path, project, "1.0.1-alpha.1")
        assert result == Ok(path)

        text = path.read_text(encoding="utf-8")
        assert text == '{\n\t"name": "web",\n\t"version": "1.0.1-alpha.1",\n\t"private": true\n}\n'

    def test_keeps_two_space_indentation(self, tmp_path: Path) -> None:
        path = _package_json(tmp_path, "web", {"name": "web", "version": "1.0.0", "scripts": {"build": "tsc"}})

        update_project_version(tmp_path, Project("web", "typescript", "1.0.0"), "1.0.1")

        # No trailing newline in, none out.
        assert path.read_text(encoding="utf-8") == (
            '{\n  "name": "web",\n  "version": "1.0.1",\n  "scripts": {\n    "build": "tsc"\n  }\n}'
        )

    def test_keeps_trailing_newline(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{\n    "version": "2.0.0"\n}\n', encoding="utf-8")

        update_project_version(tmp_path, Project(".", "typescript", "2.0.0"), "2.1.0")

        assert path.read_text(encoding="utf-8") == '{\n    "version": "2.1.0"\n}\n'

    def test_single_line_defaults_to_two_spaces(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"version": "2.0.0"}', encoding="utf-8")

        update_project_version(tmp_path, Project(".", "typescript", "2.0.0"), "2.0.1")

        assert path.read_text(encoding="utf-8") == '{\n  "version": "2.0.1"\n}'

    def test_adds_missing_version(self, tmp_path: Path) -> None:
        path = _package_json(tmp_path, "web", {"name": "web"})
        update_project_version(tmp_path, Project("web", "typescript", "1.0.0"), "1.0.1")
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == "1.0.1"

    def test_missing_manifest(self, tmp_path: Path) -> None:
        result = update_project_version(tmp_path, Project("web", "typescript", "1.0.0"), "1.0.1")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "web" / "package.json"
        path.parent.mkdir()
        path.write_text("{", encoding="utf-8")
        result = update_project_version(tmp_path, Project("web", "typescript", "1.0.0"), "1.0.1")
        assert isinstance(result, Err)


class TestCargoToml:
    def test_preserves_formatting(self, tmp_path: Path) -> None:
        path = tmp_path / "crates" / "core" / "Cargo.toml"
        path.parent.mkdir(parents=True)
        path.write_text(CARGO, encoding="utf-8")

        result = update_project_version(tmp_path, Project("crates/core", "rust", "0.3.2"), "0.4.0-rc.0")
        assert isinstance(result, Ok)

        text = path.read_text(encoding="utf-8")
        assert 'version = "0.4.0-rc.0"' in text
        assert text.startswith("# core crate\n[package]\n")
        assert 'serde = { version = "1.0", features = ["derive"] }' in text
        assert read_manifest_version(path) == "0.4.0-rc.0"

    def test_workspace_version_line(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[workspace.package]\nversion = "1.0.0"\n', encoding="utf-8")

        update_project_version(tmp_path, Project(".", "rust", "1.0.0"), "1.0.1")
        assert path.read_text(encoding="utf-8") == '[workspace.package]\nversion = "1.0.1"\n'
        assert read_manifest_version(path) == "1.0.1"

    def test_no_version(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text('[package]\nname = "x"\n', encoding="utf-8")
        result = update_project_version(tmp_path, Project(".", "rust", "1.0.0"), "1.0.1")
        assert isinstance(result, Err)
        assert "no version" in result.error.message


def test_update_many_only_touches_listed(tmp_path: Path) -> None:
    web = _package_json(tmp_path, "web", {"version": "1.0.0"})
    api = _package_json(tmp_path, "api", {"version": "2.0.0"})
    projects = [Project("web", "typescript", "1.0.0"), Project("api", "typescript", "2.0.0")]

    result = update_project_versions(tmp_path, projects, {"web": "1.0.1"})
    assert result == Ok([web])
    assert json.loads(api.read_text(encoding="utf-8"))["version"] == "2.0.0"


def test_read_manifest_version(tmp_path: Path) -> None:
    pkg = _package_json(tmp_path, ".", {"version": "3.1.4"})
    assert read_manifest_version(pkg) == "3.1.4"

    cargo = tmp_path / "Cargo.toml"
    cargo.write_text(CARGO, encoding="utf-8")
    assert read_manifest_version(cargo) == "0.3.2"

    assert read_manifest_version(tmp_path / "missing" / "package.json") is None
