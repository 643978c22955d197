"""Release commands as plain functions over a ServiceContext."""

from cdtools.services.context import ForgeProtocol, GitProtocol, ServiceContext
from cdtools.services.errors import CommandError

__all__ = [
    "CommandError",
    "ForgeProtocol",
    "GitProtocol",
    "ServiceContext",
]
