"""File-system access used by the collector and the reader.

The collector never touches `os` directly; it goes through one of these
objects so tests can run the whole loop against `MemoryFileSystem` and
inject write failures without a real disk.
"""

from __future__ import annotations

import errno
import os
import threading
from abc import ABC, abstractmethod

FILE_MODE = 0o644
DIR_MODE = 0o755


class FileSystem(ABC):
    @abstractmethod
    def makedirs(self, path: str, mode: int = DIR_MODE) -> None:
        """Create `path` and any missing parents; existing directories are fine."""
        raise NotImplementedError()

    @abstractmethod
    def write_file(self, path: str, data: str, mode: int = FILE_MODE) -> None:
        """Replace the whole content of `path` with `data`."""
        raise NotImplementedError()

    @abstractmethod
    def read_file(self, path: str) -> str:
        raise NotImplementedError()

    @abstractmethod
    def isdir(self, path: str) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def listdir(self, path: str) -> list[str]:
        raise NotImplementedError()

    def join(self, *parts: str) -> str:
        return os.path.join(*parts)


class DiskFileSystem(FileSystem):
    def makedirs(self, path: str, mode: int = DIR_MODE) -> None:
        os.makedirs(path, mode=mode, exist_ok=True)

    def write_file(self, path: str, data: str, mode: int = FILE_MODE) -> None:
        # mode only applies when the file is created, like open(2)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)

    def read_file(self, path: str) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    def isdir(self, path: str) -> bool:
        return os.path.isdir(path)

    def listdir(self, path: str) -> list[str]:
        return sorted(os.listdir(path))


class MemoryFileSystem(FileSystem):
    """In-memory tree of directories and text files.

    Paths listed in `failing` (or anything below them) raise PermissionError
    on write or makedirs, which is how tests simulate a broken disk.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._dirs: set[str] = {os.sep}
        self._files: dict[str, str] = {}
        self.modes: dict[str, int] = {}
        self.failing: set[str] = set()
        self.writes = 0

    @staticmethod
    def _norm(path: str) -> str:
        return os.path.normpath(os.path.join(os.sep, path))

    def _check(self, path: str) -> None:
        for bad in self.failing:
            bad = self._norm(bad)
            if path == bad or path.startswith(bad + os.sep):
                raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)

    def makedirs(self, path: str, mode: int = DIR_MODE) -> None:
        path = self._norm(path)
        with self._lock:
            self._check(path)
            if path in self._files:
                raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), path)
            missing: list[str] = []
            current = path
            while current not in self._dirs:
                if current in self._files:
                    raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), current)
                missing.append(current)
                current = os.path.dirname(current)
            for directory in missing:
                self._dirs.add(directory)
                self.modes[directory] = mode

    def write_file(self, path: str, data: str, mode: int = FILE_MODE) -> None:
        path = self._norm(path)
        with self._lock:
            self._check(path)
            if os.path.dirname(path) not in self._dirs:
                raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
            if path in self._dirs:
                raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
            self.modes.setdefault(path, mode)
            self._files[path] = data
            self.writes += 1

    def read_file(self, path: str) -> str:
        path = self._norm(path)
        with self._lock:
            try:
                return self._files[path]
            except KeyError:
                raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path) from None

    def exists(self, path: str) -> bool:
        path = self._norm(path)
        with self._lock:
            return path in self._files or path in self._dirs

    def isdir(self, path: str) -> bool:
        with self._lock:
            return self._norm(path) in self._dirs

    def listdir(self, path: str) -> list[str]:
        path = self._norm(path)
        with self._lock:
            if path not in self._dirs:
                raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
            entries = {p for p in (*self._dirs, *self._files) if p != path and os.path.dirname(p) == path}
        return sorted(os.path.basename(p) for p in entries)
