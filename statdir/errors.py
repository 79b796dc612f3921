"""Exceptions raised by the collector."""

from __future__ import annotations

from dataclasses import dataclass


class StatdirError(Exception):
    pass


class CollectorStartError(StatdirError, OSError):
    """The stats directory could not be prepared; the loop never started."""


class CounterNotFoundError(StatdirError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"counter {self.name}: doesn't exist"


class CollectorStateError(StatdirError, RuntimeError):
    pass


class CollectorNotRunningError(CollectorStateError):
    def __init__(self, message: str = "collector is not accepting updates"):
        super().__init__(message)


@dataclass(frozen=True)
class WriteError:
    """A best-effort write that failed inside the collection loop."""

    path: str
    error: OSError
