"""Pytest configuration.

Every test gets a clean slate: no STATDIR_* environment overrides leaking in
from the developer's shell, and zeroed process-wide metrics.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import pytest

from statdir.metrics import metrics

_ENV_VARS = (
    "STATDIR_LOG_LEVEL",
    "STATDIR_LOG_CATS",
    "STATDIR_REPORT_WRITE_ERRORS",
    "STATDIR_FILE_MODE",
    "STATDIR_DIR_MODE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    metrics.reset()
    yield


def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll `predicate` until it is true; the loop persists asynchronously."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def wait_for():
    return _wait_for
