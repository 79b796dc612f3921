"""statdir - counters mirrored to plain files in a directory.

Usage:
    from statdir import Collector

    c = Collector("/tmp/STAT")
    c.add_counter("SUCCESS")
    with c:
        c.inc("SUCCESS")
"""

from .collector import FINISHED, STARTED, Collector
from .errors import (
    CollectorNotRunningError,
    CollectorStartError,
    CollectorStateError,
    CounterNotFoundError,
    StatdirError,
    WriteError,
)
from .fs import DiskFileSystem, FileSystem, MemoryFileSystem
from .reader import StatsSnapshot, read_directory
from .settings import Settings

__all__ = [
    "FINISHED",
    "STARTED",
    "Collector",
    "CollectorNotRunningError",
    "CollectorStartError",
    "CollectorStateError",
    "CounterNotFoundError",
    "DiskFileSystem",
    "FileSystem",
    "MemoryFileSystem",
    "Settings",
    "StatdirError",
    "StatsSnapshot",
    "WriteError",
    "read_directory",
]
