from __future__ import annotations

import re
from pathlib import Path
from typing import cast

from cdtools.core.result import Err, Ok, Result
from cdtools.manifest.updater import MANIFEST_FILES, read_manifest_version
from cdtools.output.console import Style
from cdtools.services.context import ServiceContext
from cdtools.services.errors import CommandError
from cdtools.state.model import (
    Config,
    Project,
    Registry,
    ReleaseNotes,
    VersionTagConfig,
    VersioningStrategy,
)
from cdtools.state.store import CDTOOLS_DIR, config_path, is_initialized, save_config

DEFAULT_VERSION_TAGS: tuple[VersionTagConfig, ...] = (
    VersionTagConfig(name="alpha", version_suffix_strategy="timestamp", next="rc"),
    VersionTagConfig(name="rc", version_suffix_strategy="increment", next="stable"),
)

DEFAULT_RELEASE_NOTES = ReleaseNotes(enabled=False, template="Release {project} {version}")

_DEFAULT_REGISTRIES: dict[str, tuple[Registry, ...]] = {
    "typescript": ("npm",),
    "rust": ("crates",),
}

_PLAIN_VERSION_RE = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


def detect_projects(root: Path) -> list[Project]:
    """Projects whose manifest sits at ``root``.

    The base version comes from the manifest when it is a plain ``X.Y.Z``,
    else ``0.0.0``.
    """
    projects: list[Project] = []
    for project_type, filename in MANIFEST_FILES.items():
        manifest = root / filename
        if not manifest.is_file():
            continue
        version = read_manifest_version(manifest)
        base = version if version is not None and _PLAIN_VERSION_RE.fullmatch(version) else "0.0.0"
        projects.append(
            Project(
                path=".",
                type=project_type,
                base_version=base,
                deps=(filename,),
                registries=_DEFAULT_REGISTRIES[project_type],
            )
        )
    return projects


def default_config(strategy: VersioningStrategy, projects: list[Project]) -> Config:
    return Config(
        versioning_strategy=strategy,
        version_tags=DEFAULT_VERSION_TAGS,
        projects=tuple(projects),
        release_notes=DEFAULT_RELEASE_NOTES,
    )


def run_init(ctx: ServiceContext) -> Result[Config | None, CommandError]:
    """Write a default ``.cdtools/config.json``.

    Returns Ok(None) when the user declines to overwrite an existing config.
    """
    console = ctx.console
    console.header("Initializing cd-tools")

    if is_initialized(ctx.root):
        overwrite = ctx.prompt.confirm(f"{CDTOOLS_DIR}/config.json already exists. Overwrite?")
        if not overwrite:
            console.print("Initialization cancelled.", Style.DIM)
            return Ok(None)

    strategy = ctx.prompt.choose(
        "Versioning strategy",
        [
            ("fixed", "fixed (all projects share one version)"),
            ("independent", "independent (each project is versioned on its own)"),
        ],
        default="fixed",
    )
    if strategy is None:
        return Err(CommandError("Initialization cancelled"))

    projects = detect_projects(ctx.root)
    if projects:
        for project in projects:
            console.print(f"  {project.type}: {project.path} ({project.base_version})", Style.DIM)
    else:
        console.warning("no package.json or Cargo.toml found; add projects to the config by hand")

    config = default_config(cast(VersioningStrategy, strategy), projects)
    saved = save_config(ctx.root, config)
    if isinstance(saved, Err):
        return Err(CommandError.from_state(saved.error))

    console.success(f"wrote {config_path(ctx.root).relative_to(ctx.root).as_posix()}")
    return Ok(config)
