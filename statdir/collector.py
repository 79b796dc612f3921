"""Directory-backed counter collector.

Typical use from a long-running import job:

    c = Collector("/tmp/STAT")
    c.add_counter("SUCCESS")
    c.add_counter("FAILURE")
    c.start()                 # or run c.collect() on your own thread
    c.inc("SUCCESS", 30)
    c.inc("FAILURE", 10)
    c.finish()

which leaves behind:

    /tmp/STAT/STARTED   # start time (RFC3339)
    /tmp/STAT/FINISHED  # finish time
    /tmp/STAT/SUCCESS   # "30"
    /tmp/STAT/FAILURE   # "10"

Every update rewrites a file, so this is meant for progress indicators, not
for hot paths.
"""

from __future__ import annotations

import operator
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime

from .errors import (
    CollectorNotRunningError,
    CollectorStartError,
    CollectorStateError,
    CounterNotFoundError,
    StatdirError,
    WriteError,
)
from .fs import DiskFileSystem, FileSystem
from .logger import get_logger
from .metrics import metrics
from .settings import Settings
from .timefmt import format_rfc3339, now

_logger = get_logger("collector")

STARTED = "STARTED"
FINISHED = "FINISHED"

_INC = "inc"
_SET = "set"
_QUIT = "quit"

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _wrap_int64(value: int) -> int:
    return (value - _INT64_MIN) % 2**64 + _INT64_MIN


def _as_int64(value: object, what: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{what} must be an integer, not bool")
    number = operator.index(value)  # TypeError for floats, strings, ...
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"{what} {number} does not fit in a signed 64-bit integer")
    return number


class _Counter:
    __slots__ = ("value",)

    def __init__(self) -> None:
        # Only the loop assigns; readers do a single reference load.
        self.value = 0


@dataclass
class _Op:
    kind: str
    name: str = ""
    value: int = 0
    accepted: threading.Event = field(default_factory=threading.Event)
    error: StatdirError | None = None


class Collector:
    """Owns a set of named counters and mirrors each one to a file.

    All mutation and all file writes happen on the thread running `collect`.
    Producers hand requests over with `inc`/`set`/`finish`, which block until
    the loop picks the request up, so a slow disk throttles the producers
    instead of building a backlog.
    """

    def __init__(self, path: str, fs: FileSystem | None = None, settings: Settings | None = None):
        self._path = path
        self._fs = fs or DiskFileSystem()
        self._settings = settings or Settings()
        self._counters: dict[str, _Counter] = {}
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None
        self._ready = threading.Event()
        self._gate = threading.Lock()
        self._channel: queue.SimpleQueue[_Op] | None = None
        self._collecting = False
        self._outcome: Future | None = None
        self.errors: queue.Queue[WriteError] = queue.Queue()

    # -- registration and reads -------------------------------------------------

    def add_counter(self, name: str) -> None:
        """Register `name` at zero unless it is already registered.

        Not thread safe; register everything before calling `collect`.
        """
        if self._collecting:
            raise CollectorStateError(f"cannot register counter {name} while collecting")
        if name not in self._counters:
            self._counters[name] = _Counter()

    @property
    def path(self) -> str:
        return self._path

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def finished_at(self) -> datetime | None:
        return self._finished_at

    @property
    def ready(self) -> threading.Event:
        """Set once `collect` has written STARTED and accepts updates."""
        return self._ready

    @property
    def running(self) -> bool:
        return self._channel is not None

    def wait_ready(self, timeout: float | None = None) -> bool:
        return self._ready.wait(timeout)

    def value_of(self, name: str) -> int:
        """Current in-memory value; may be one write ahead of the file. Thread safe."""
        counter = self._counters.get(name)
        if counter is None:
            raise CounterNotFoundError(name)
        return counter.value

    def counters(self) -> dict[str, int]:
        return {name: counter.value for name, counter in self._counters.items()}

    # -- producers ----------------------------------------------------------------

    def inc(self, name: str, delta: int = 1) -> None:
        self._handoff(_Op(_INC, name, _as_int64(delta, "delta")))

    def set(self, name: str, value: int) -> None:
        self._handoff(_Op(_SET, name, _as_int64(value, "value")))

    def finish(self) -> None:
        """Ask the loop to stop; returns once the loop has accepted the request."""
        self._handoff(_Op(_QUIT))

    def _handoff(self, op: _Op) -> None:
        with self._gate:
            if self._channel is None:
                raise CollectorNotRunningError()
            self._channel.put(op)
        op.accepted.wait()
        if op.error is not None:
            raise op.error

    # -- the loop -------------------------------------------------------------------

    def collect(self) -> None:
        """Run the collection loop on the calling thread until `finish` is called.

        Raises CollectorStartError when the directory cannot be created; in
        that case nothing is written and the loop never starts.
        """
        with self._gate:
            if self._collecting:
                raise CollectorStateError("collector is already collecting")
            self._collecting = True
        try:
            self._run()
        finally:
            self._collecting = False

    def _run(self) -> None:
        try:
            self._fs.makedirs(self._path, self._settings.dir_mode)
        except OSError as exc:
            _logger.error("cannot create stats directory %s: %s", self._path, exc)
            raise CollectorStartError(f"cannot create stats directory {self._path}: {exc}") from exc

        files = self._counter_files()
        started_file = self._fs.join(self._path, STARTED)
        finished_file = self._fs.join(self._path, FINISHED)

        self._ready.clear()
        self._started_at = now()
        self._persist(started_file, format_rfc3339(self._started_at))
        channel: queue.SimpleQueue[_Op] = queue.SimpleQueue()
        try:
            with self._gate:
                self._channel = channel
            _logger.info("collecting %d counter(s) into %s", len(files), self._path)
            self._ready.set()
            self._loop(channel, files)
        finally:
            self._close(channel)
            self._finished_at = now()
            self._persist(finished_file, format_rfc3339(self._finished_at))
            _logger.info("collection into %s finished", self._path)

    def _counter_files(self) -> dict[str, str]:
        files: dict[str, str] = {}
        owners: dict[str, str] = {}
        for name in self._counters:
            fname = name.upper()
            if fname in owners:
                # Kept as is: both counters stay separate in memory but share a file.
                _logger.warning("counters %r and %r both persist to %s", owners[fname], name, fname)
            owners.setdefault(fname, name)
            files[name] = self._fs.join(self._path, fname)
        return files

    def _loop(self, channel: queue.SimpleQueue[_Op], files: dict[str, str]) -> None:
        while True:
            op = channel.get()
            op.accepted.set()
            if op.kind == _QUIT:
                return
            fname = files.get(op.name)
            if fname is None:
                metrics.inc("collector.dropped")
                _logger.debug("dropping update for unknown counter %r", op.name)
                continue
            counter = self._counters[op.name]
            if op.kind == _INC:
                counter.value = _wrap_int64(counter.value + op.value)
            else:
                counter.value = op.value
            metrics.inc("collector.ops_applied")
            self._persist(fname, str(counter.value))

    def _close(self, channel: queue.SimpleQueue[_Op]) -> None:
        with self._gate:
            self._channel = None
        self._ready.clear()
        # Producers that slipped in before the gate closed must not hang.
        while True:
            try:
                op = channel.get_nowait()
            except queue.Empty:
                break
            op.error = CollectorNotRunningError("collector finished before accepting the update")
            op.accepted.set()

    def _persist(self, path: str, text: str) -> None:
        # Best effort: one attempt, failures are counted and optionally reported.
        try:
            with metrics.timed("collector.write_duration"):
                self._fs.write_file(path, text, self._settings.file_mode)
        except OSError as exc:
            metrics.inc("collector.write_failures")
            _logger.debug("write to %s failed: %s", path, exc)
            if self._settings.report_write_errors:
                self.errors.put(WriteError(path, exc))

    # -- background helpers -------------------------------------------------------

    def start(self) -> threading.Thread:
        """Run `collect` on a daemon thread and wait until it is ready.

        Startup errors (e.g. CollectorStartError) are raised here, in the
        caller's thread.
        """
        with self._gate:
            if self._collecting:
                raise CollectorStateError("collector is already collecting")
        outcome: Future = Future()

        def _run() -> None:
            try:
                self.collect()
            except BaseException as exc:  # handed to whoever joins
                outcome.set_exception(exc)
            else:
                outcome.set_result(None)

        self._ready.clear()
        self._outcome = outcome
        thread = threading.Thread(target=_run, name=f"statdir-collector:{self._path}", daemon=True)
        thread.start()
        while not self._ready.wait(timeout=0.05):
            if outcome.done():
                outcome.result()
                raise CollectorStateError("collector stopped before it became ready")
        return thread

    def join(self, timeout: float | None = None) -> None:
        """Wait for a loop started with `start`; re-raises what the loop raised."""
        if self._outcome is not None:
            self._outcome.result(timeout=timeout)

    def __enter__(self) -> Collector:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.running:
            try:
                self.finish()
            except CollectorNotRunningError:
                _logger.debug("collector already stopped on exit")
        self.join()
