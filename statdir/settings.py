from __future__ import annotations

import json
import os
from typing import Any

from .fs import DIR_MODE, FILE_MODE
from .logger import get_logger

_logger = get_logger("settings")

_TRUTHY = ("1", "true", "yes", "on")


class Settings:
    """Collector settings kept in an optional JSON file.

    Values from the environment win over the file:
    STATDIR_REPORT_WRITE_ERRORS, STATDIR_FILE_MODE, STATDIR_DIR_MODE
    (modes in octal, e.g. "640").
    """

    DEFAULTS: dict[str, Any] = {
        "file_mode": FILE_MODE,
        "dir_mode": DIR_MODE,
        "report_write_errors": False,
    }

    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        self._settings = {}
        if self.settings_path:
            try:
                if os.path.exists(self.settings_path):
                    with open(self.settings_path, encoding="utf-8") as f:
                        data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                    else:
                        _logger.warning("settings ignored, not a JSON object: %s", self.settings_path)
            except (OSError, ValueError) as e:
                _logger.warning("settings load failed: %s", e)
        self._apply_env()

    def _apply_env(self) -> None:
        flag = os.getenv("STATDIR_REPORT_WRITE_ERRORS")
        if flag is not None:
            self._settings["report_write_errors"] = flag.strip().lower() in _TRUTHY
        for key, env in (("file_mode", "STATDIR_FILE_MODE"), ("dir_mode", "STATDIR_DIR_MODE")):
            raw = os.getenv(env)
            if not raw:
                continue
            try:
                self._settings[key] = int(raw, 8)
            except ValueError:
                _logger.warning("ignoring %s=%r, expected an octal mode", env, raw)

    def save(self) -> None:
        if not self.settings_path:
            return
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def file_mode(self) -> int:
        return _as_mode(self.get("file_mode"), FILE_MODE)

    @property
    def dir_mode(self) -> int:
        return _as_mode(self.get("dir_mode"), DIR_MODE)

    @property
    def report_write_errors(self) -> bool:
        return bool(self.get("report_write_errors", False))


def _as_mode(value: Any, fallback: int) -> int:
    # JSON has no octal literals; accept "644" strings as well as ints
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 8)
        except ValueError:
            _logger.warning("invalid mode %r, using %o", value, fallback)
    return fallback
