from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cdtools.git.repository import GitError
    from cdtools.github.gh import ForgeError
    from cdtools.manifest.updater import ManifestError
    from cdtools.state.store import StateError


@dataclass(frozen=True, slots=True)
class CommandError:
    message: str
    hint: str | None = None

    @classmethod
    def from_git(cls, error: GitError) -> CommandError:
        return cls(message=error.message, hint=error.hint)

    @classmethod
    def from_forge(cls, error: ForgeError, *, hint: str | None = None) -> CommandError:
        return cls(message=error.message, hint=hint or error.hint)

    @classmethod
    def from_manifest(cls, error: ManifestError) -> CommandError:
        return cls(message=error.message)

    @classmethod
    def from_state(cls, error: StateError, *, hint: str | None = None) -> CommandError:
        return cls(message=error.message, hint=hint)


NOT_INITIALIZED = CommandError(
    message="cd-tools has not been initialized",
    hint="Run: cd-tools init",
)

NO_BRANCH_INFO_HINT = "Run: cd-tools start-pr"
