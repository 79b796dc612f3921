from datetime import timedelta
from pathlib import Path

import pytest

from statdir import Collector, MemoryFileSystem, read_directory
from statdir.timefmt import parse_rfc3339


def test_reads_what_the_collector_wrote(tmp_path: Path):
    stats = tmp_path / "stats"
    c = Collector(str(stats))
    for name in ("success", "failure"):
        c.add_counter(name)
    with c:
        c.inc("success", 30)
        c.inc("failure", 10)

    snap = read_directory(str(stats))
    assert snap.counters == {"FAILURE": 10, "SUCCESS": 30}
    assert snap.finished
    assert snap.started_at is not None and snap.started_at <= snap.finished_at
    assert snap.elapsed() >= timedelta(0)


def test_running_directory_and_junk_files():
    fs = MemoryFileSystem()
    fs.makedirs("/stats/nested")
    fs.write_file("/stats/STARTED", "2014-05-01T10:00:00Z")
    fs.write_file("/stats/FOO", "12\n")
    fs.write_file("/stats/NOTES", "hello")
    snap = read_directory("/stats", fs=fs)
    assert snap.counters == {"FOO": 12}
    assert not snap.finished
    later = parse_rfc3339("2014-05-01T10:01:00Z")
    assert snap.elapsed(at=later) == timedelta(minutes=1)


def test_bad_marker_is_ignored():
    fs = MemoryFileSystem()
    fs.makedirs("/stats")
    fs.write_file("/stats/STARTED", "yesterday")
    snap = read_directory("/stats", fs=fs)
    assert snap.started_at is None
    assert snap.elapsed() is None


def test_missing_directory(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_directory(str(tmp_path / "nope"))


def test_marker_that_is_a_directory_is_ignored(tmp_path: Path):
    stats = tmp_path / "stats"
    (stats / "STARTED").mkdir(parents=True)
    (stats / "FOO").write_text("3", encoding="utf-8")
    snap = read_directory(str(stats))
    assert snap.started_at is None
    assert snap.counters == {"FOO": 3}
