"""`statdir` command line: inspect a stats directory written by a Collector."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .logger import setup_logger
from .reader import StatsSnapshot, read_directory
from .timefmt import format_rfc3339


def _as_dict(snap: StatsSnapshot) -> dict:
    elapsed = snap.elapsed()
    return {
        "path": snap.path,
        "started": format_rfc3339(snap.started_at) if snap.started_at else None,
        "finished": format_rfc3339(snap.finished_at) if snap.finished_at else None,
        "elapsed_seconds": elapsed.total_seconds() if elapsed is not None else None,
        "counters": snap.counters,
    }


def _print_text(snap: StatsSnapshot) -> None:
    data = _as_dict(snap)
    print(f"path:     {data['path']}")
    print(f"started:  {data['started'] or '-'}")
    print(f"finished: {data['finished'] or '(running)'}")
    if data["elapsed_seconds"] is not None:
        print(f"elapsed:  {data['elapsed_seconds']:.0f}s")
    width = max((len(name) for name in snap.counters), default=0)
    for name, value in snap.counters.items():
        print(f"{name:<{width}}  {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="statdir", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)
    show = sub.add_parser("show", help="Print markers and counters of a stats directory")
    show.add_argument("path")
    show.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        snap = read_directory(args.path)
    except OSError as exc:
        print(f"statdir: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(_as_dict(snap), indent=2, sort_keys=True))
    else:
        _print_text(snap)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
