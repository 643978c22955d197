"""Tag state machine: which version a project gets on a tag, and after it.

States are the configured tags plus the implicit terminal ``stable``.
Unknown tags are configuration bugs and raise ``VersionManagerError``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from cdtools.state.model import (
    Config,
    Project,
    VersionTagConfig,
    available_tags,
    is_stable,
    resolve_tag_config,
)
from cdtools.version.semver import Version, format_version, parse_version
from cdtools.version.suffix import SuffixStrategy, TagLister, compute_suffixed_version

if TYPE_CHECKING:
    from cdtools.output.console import ConsoleProtocol

__all__ = [
    "VersionManager",
    "VersionManagerError",
]


class VersionManagerError(ValueError):
    """Raised for a tag that is neither configured nor ``stable``."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Unknown version tag: {tag}")
        self.tag = tag


class VersionManager:
    def __init__(
        self,
        config: Config,
        list_tags: TagLister,
        *,
        now: datetime | None = None,
        console: ConsoleProtocol | None = None,
    ) -> None:
        self._config = config
        self._list_tags = list_tags
        self._now = now
        self._console = console

    @property
    def config(self) -> Config:
        return self._config

    def available_tags(self) -> list[str]:
        return available_tags(self._config)

    def tag_config(self, tag: str) -> VersionTagConfig:
        tag_config = resolve_tag_config(self._config, tag)
        if tag_config is None:
            raise VersionManagerError(tag)
        return tag_config

    def is_valid_tag(self, tag: str) -> bool:
        return resolve_tag_config(self._config, tag) is not None

    def tag_strategy(self, tag: str) -> SuffixStrategy:
        return self.tag_config(tag).version_suffix_strategy

    def next_tag(self, tag: str) -> str | None:
        return self.tag_config(tag).next

    def suffixed(self, base: Version, tag: str) -> str:
        """``<base>-<tag>.<suffix>`` using the tag's own strategy."""
        return compute_suffixed_version(
            format_version(base.core),
            tag,
            self.tag_strategy(tag),
            self._list_tags,
            now=self._now,
            console=self._console,
        )

    def calculate_version_for_tag(
        self, tag: str, project: Project, current_version: str | None = None
    ) -> str:
        """Version for another build of ``project`` on ``tag``.

        ``stable`` is a patch bump of the base version with no suffix. For
        other tags the base is patch-bumped, unless ``current_version`` is
        already on ``tag``, in which case its numeric base is kept and only
        the suffix advances.
        """
        tag_config = self.tag_config(tag)
        base = parse_version(project.base_version)
        if is_stable(tag_config.name):
            return format_version(base.bump("patch"))

        if current_version is not None:
            current = parse_version(current_version)
            if current.prerelease is not None and current.prerelease.startswith(f"{tag}."):
                return self.suffixed(current, tag)

        return self.suffixed(base.bump("patch"), tag)

    def calculate_next_tag_version(
        self, current_tag: str, project: Project, current_version: str | None = None
    ) -> str:
        """Version after leaving ``current_tag`` for its ``next`` tag.

        No ``next``: another build on ``current_tag``. ``next`` is stable:
        the current version without its prerelease (or a patch bump of the
        base when there is none). Otherwise the next tag starts fresh on the
        in-cycle numeric base.
        """
        next_tag = self.tag_config(current_tag).next
        if next_tag is None:
            return self.calculate_version_for_tag(current_tag, project, current_version)

        # Unknown successors are a config bug too.
        self.tag_config(next_tag)

        if current_version is not None:
            base = parse_version(current_version).core
        else:
            base = parse_version(project.base_version).bump("patch")

        if is_stable(next_tag):
            return format_version(base)
        return self.suffixed(base, next_tag)
