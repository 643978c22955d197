"""Platform abstraction layer: subprocesses and file writes."""

from .files import atomic_write_text, dump_json, write_json
from .process import ProcessError, run

__all__ = [
    # files
    "atomic_write_text",
    "dump_json",
    "write_json",
    # process
    "ProcessError",
    "run",
]
