"""Git operations for release branches.

Usage:
    from cdtools.git import Repository

    repo = Repository(Path("."))
    files = repo.changed_files("main")
"""

from cdtools.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
]
