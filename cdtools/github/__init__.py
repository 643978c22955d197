"""GitHub collaborator (via the gh CLI)."""

from cdtools.github.forge import GitHub
from cdtools.github.gh import ForgeError, PrCheck, PrStatus

__all__ = [
    "ForgeError",
    "GitHub",
    "PrCheck",
    "PrStatus",
]
