"""Read-only view of a stats directory, as a monitoring script would see it."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .collector import FINISHED, STARTED
from .fs import DiskFileSystem, FileSystem
from .logger import get_logger
from .timefmt import now, parse_rfc3339

_logger = get_logger("reader")


@dataclass
class StatsSnapshot:
    path: str
    started_at: datetime | None = None
    finished_at: datetime | None = None
    counters: dict[str, int] = field(default_factory=dict)

    @property
    def finished(self) -> bool:
        return self.finished_at is not None

    def elapsed(self, at: datetime | None = None) -> timedelta | None:
        """Run time so far, or total run time once FINISHED exists."""
        if self.started_at is None:
            return None
        end = self.finished_at or at or now()
        return end - self.started_at


def _read_marker(fs: FileSystem, path: str) -> datetime | None:
    try:
        return parse_rfc3339(fs.read_file(path))
    except FileNotFoundError:
        return None
    except OSError as exc:
        _logger.warning("cannot read %s: %s", path, exc)
        return None
    except ValueError as exc:
        _logger.warning("unreadable timestamp in %s: %s", path, exc)
        return None


def read_directory(path: str, fs: FileSystem | None = None) -> StatsSnapshot:
    """Collect markers and counter values found under `path`.

    Raises FileNotFoundError if `path` is not a directory and OSError if it
    cannot be listed. Files whose content is not a decimal integer are skipped.
    """
    fs = fs or DiskFileSystem()
    if not fs.isdir(path):
        raise FileNotFoundError(f"no stats directory at {path}")
    snap = StatsSnapshot(path=path)
    snap.started_at = _read_marker(fs, fs.join(path, STARTED))
    snap.finished_at = _read_marker(fs, fs.join(path, FINISHED))
    for entry in fs.listdir(path):
        if entry in (STARTED, FINISHED):
            continue
        full = fs.join(path, entry)
        if fs.isdir(full):
            continue
        try:
            snap.counters[entry] = int(fs.read_file(full).strip())
        except ValueError:
            _logger.debug("skipping non-counter file %s", full)
        except OSError as exc:
            # the collector may be rewriting it right now
            _logger.debug("cannot read %s: %s", full, exc)
    return snap
