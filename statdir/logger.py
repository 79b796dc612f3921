"""Project logger: one `statdir` logger writing to stderr.

STATDIR_LOG_LEVEL picks the level (debug, info, warning, ...) and
STATDIR_LOG_CATS=collector,reader keeps only those child loggers.
"""

import logging
import os
import sys

_BASE = "statdir"


class _CategoryFilter(logging.Filter):
    def __init__(self, allowed: set[str]):
        super().__init__()
        self.allowed = allowed

    def filter(self, record: logging.LogRecord) -> bool:
        # statdir.collector -> collector
        return record.name.rpartition(".")[2] in self.allowed


def _stderr_handler(logger: logging.Logger) -> logging.StreamHandler:
    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
            return h
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    return handler


def setup_logger(level: int = logging.WARNING) -> logging.Logger:
    """Configure the `statdir` logger; safe to call repeatedly.

    Env overrides are re-read on every call so a CLI flag parsed late still
    takes effect, and the stderr handler is reused rather than duplicated.
    """
    logger = logging.getLogger(_BASE)
    env_level = (os.getenv("STATDIR_LOG_LEVEL") or "").strip().upper()
    resolved = logging.getLevelName(env_level) if env_level else level
    logger.setLevel(resolved if isinstance(resolved, int) else level)

    handler = _stderr_handler(logger)
    handler.filters.clear()
    cats = {c.strip() for c in (os.getenv("STATDIR_LOG_CATS") or "").split(",") if c.strip()}
    if cats:
        handler.addFilter(_CategoryFilter(cats))

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return setup_logger().getChild(name)
