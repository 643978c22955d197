"""Process exit codes.

cd-tools keeps the contract deliberately small: a command either succeeds
(including a gracefully declined confirmation) or fails hard.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success, or the user declined a confirmation
    - 1: Any hard failure (missing config, failed git/gh call, invalid tag)
    """

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower()

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
