"""RFC3339 timestamps for the STARTED/FINISHED marker files."""

from __future__ import annotations

from datetime import datetime, timedelta


def now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def format_rfc3339(moment: datetime) -> str:
    """Seconds precision, numeric offset or Z for UTC (e.g. 2014-05-01T10:20:30+02:00)."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.isoformat(timespec="seconds")
    if moment.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def parse_rfc3339(text: str) -> datetime:
    """Parse a marker file's content; raises ValueError on anything else."""
    text = text.strip()
    if "T" not in text.upper():
        raise ValueError(f"not an RFC3339 timestamp: {text!r}")
    if text[-1:] in ("z", "Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        raise ValueError(f"RFC3339 timestamp without offset: {text!r}")
    return moment
