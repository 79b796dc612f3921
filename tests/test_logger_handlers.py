import logging
import sys

from statdir import logger as sd_logger


def _stderr_handlers(base: logging.Logger) -> list[logging.Handler]:
    return [h for h in base.handlers if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr]


def test_setup_logger_idempotent_handlers():
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    base = sd_logger.setup_logger(level=logging.DEBUG)
    _ = sd_logger.setup_logger(level=logging.DEBUG)
    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_wins(monkeypatch):
    monkeypatch.setenv("STATDIR_LOG_LEVEL", "error")
    base = sd_logger.setup_logger(level=logging.DEBUG)
    assert base.level == logging.ERROR


def test_category_filter(monkeypatch):
    monkeypatch.setenv("STATDIR_LOG_CATS", "collector")
    base = sd_logger.setup_logger()
    (handler,) = _stderr_handlers(base)

    def _record(name: str) -> logging.LogRecord:
        return logging.LogRecord(name, logging.INFO, __file__, 1, "msg", None, None)

    assert handler.filter(_record("statdir.collector"))
    assert not handler.filter(_record("statdir.reader"))

    monkeypatch.delenv("STATDIR_LOG_CATS")
    sd_logger.setup_logger()
    assert handler.filter(_record("statdir.reader"))


def test_get_logger_children():
    child = sd_logger.get_logger("collector")
    assert child.name == "statdir.collector"
    assert child.parent is sd_logger.setup_logger()


def test_unknown_env_level_keeps_requested_level(monkeypatch):
    monkeypatch.setenv("STATDIR_LOG_LEVEL", "chatty")
    base = sd_logger.setup_logger(level=logging.INFO)
    assert base.level == logging.INFO
