"""Release state: config policy and per-branch ledgers."""

from .model import (
    STABLE_TAG,
    BranchInfo,
    Config,
    Project,
    ProjectUpdate,
    ReleaseBranch,
    ReleaseNotes,
    VersionTagConfig,
    is_stable,
    merge_project_updated,
    parse_branch_name,
    resolve_tag_config,
)
from .store import NotFoundError, StateError, ValidationError, WriteError

__all__ = [
    # model
    "STABLE_TAG",
    "BranchInfo",
    "Config",
    "Project",
    "ProjectUpdate",
    "ReleaseBranch",
    "ReleaseNotes",
    "VersionTagConfig",
    "is_stable",
    "merge_project_updated",
    "parse_branch_name",
    "resolve_tag_config",
    # store
    "NotFoundError",
    "StateError",
    "ValidationError",
    "WriteError",
]
