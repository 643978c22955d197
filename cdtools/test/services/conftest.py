from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeAlias

import pytest

from cdtools.output.console import MockConsole
from cdtools.output.prompt import ScriptedPrompt
from cdtools.services.context import ServiceContext
from cdtools.services.fakes import MockForge, MockGit
from cdtools.state.model import Config, Project, ReleaseNotes, VersionTagConfig
from cdtools.state.store import save_config

NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def independent_config(*, release_notes: bool = False) -> Config:
    return Config(
        versioning_strategy="independent",
        version_tags=(
            VersionTagConfig(name="alpha", version_suffix_strategy="timestamp", next="rc"),
            VersionTagConfig(name="rc", version_suffix_strategy="increment", next="stable"),
        ),
        projects=(
            Project(
                path="packages/web",
                type="typescript",
                base_version="1.0.0",
                deps=("shared",),
                registries=("npm",),
            ),
            Project(path="crates/core", type="rust", base_version="0.3.2", registries=("crates",)),
        ),
        release_notes=ReleaseNotes(enabled=release_notes, template="{project} {version}"),
    )


def write_manifests(root: Path) -> None:
    web = root / "packages" / "web"
    web.mkdir(parents=True)
    (web / "package.json").write_text('{\n\t"name": "web",\n\t"version": "1.0.0"\n}\n', encoding="utf-8")
    core = root / "crates" / "core"
    core.mkdir(parents=True)
    (core / "Cargo.toml").write_text('[package]\nname = "core"\nversion = "0.3.2"\n', encoding="utf-8")


@pytest.fixture
def config() -> Config:
    return independent_config()


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def git() -> MockGit:
    return MockGit(branch="main", branches=["main", "develop"])


@pytest.fixture
def forge() -> MockForge:
    return MockForge()


@pytest.fixture
def repo(tmp_path: Path, config: Config) -> Path:
    """A workspace with two projects and their config."""
    write_manifests(tmp_path)
    save_config(tmp_path, config)
    return tmp_path


ContextFactory: TypeAlias = Callable[..., ServiceContext]


@pytest.fixture
def make_ctx(repo: Path, console: MockConsole, git: MockGit, forge: MockForge) -> ContextFactory:
    def factory(*answers: object, root: Path | None = None) -> ServiceContext:
        return ServiceContext(
            root=root or repo,
            console=console,
            prompt=ScriptedPrompt(answers=list(answers)),
            git=git,
            forge=forge,
            now=NOW,
        )

    return factory
