import json
from pathlib import Path

from statdir import Collector, DiskFileSystem
from statdir.cli import main


def _collect(stats: Path) -> None:
    c = Collector(str(stats))
    c.add_counter("rows")
    with c:
        c.inc("rows", 42)


def test_show_json(tmp_path: Path, capsys):
    stats = tmp_path / "stats"
    _collect(stats)
    assert main(["show", str(stats), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["counters"] == {"ROWS": 42}
    assert data["started"] and data["finished"]
    assert data["elapsed_seconds"] >= 0


def test_show_text(tmp_path: Path, capsys):
    stats = tmp_path / "stats"
    _collect(stats)
    assert main(["show", str(stats)]) == 0
    out = capsys.readouterr().out
    assert "ROWS  42" in out
    assert "finished: " in out and "(running)" not in out


def test_show_missing_directory(tmp_path: Path, capsys):
    assert main(["show", str(tmp_path / "nope")]) == 1
    assert "no stats directory" in capsys.readouterr().err


def test_show_unlistable_directory(tmp_path: Path, capsys, monkeypatch):
    stats = tmp_path / "stats"
    _collect(stats)

    def _denied(self, path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr(DiskFileSystem, "listdir", _denied)
    assert main(["show", str(stats)]) == 1
    assert "Permission denied" in capsys.readouterr().err
