"""
Active log file lifecycle.

A session is either absent or open: one append-mode handle bound to one
path. Opening a new session always closes the previous handle first.
"""

import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, TextIO

LOG_PREFIX = "log"
LOG_SUFFIX = ".log"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"


class LogSession:
    """Owns the active log file handle."""

    def __init__(
        self,
        directory: str | Path = "logs",
        clock: Callable[[], float] | None = None,
        prefix: str = LOG_PREFIX,
        suffix: str = LOG_SUFFIX,
    ):
        self.directory = Path(directory)
        self.prefix = prefix
        self.suffix = suffix
        self._clock = clock or time.time
        self._path: Path | None = None
        self._file: TextIO | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def next_path(self) -> Path:
        """
        Timestamped file name. A counter is appended when the stem is taken,
        including by a compressed artifact of an earlier session.
        """
        stamp = datetime.fromtimestamp(self._clock()).strftime(TIMESTAMP_FORMAT)
        stem = f"{self.prefix}_{stamp}"
        n = 1
        while self._stem_taken(stem):
            stem = f"{self.prefix}_{stamp}_{n}"
            n += 1
        return self.directory / f"{stem}{self.suffix}"

    def _stem_taken(self, stem: str) -> bool:
        return (self.directory / f"{stem}{self.suffix}").exists() or any(self.directory.glob(f"{stem}.*"))

    def generate(self) -> Path:
        """
        Open a fresh log file, closing any still-open previous one.
        Raises OSError if the directory or file cannot be created.
        """
        with self._lock:
            self._close_locked()
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.next_path()
            self._file = open(path, "a", encoding="utf-8")
            self._path = path
            return path

    def write(self, line: str) -> None:
        """Append one line and flush it to the OS. Raises OSError on failure."""
        with self._lock:
            if self._file is None:
                return
            self._file.write(line if line.endswith("\n") else line + "\n")
            self._file.flush()

    def release(self) -> Path | None:
        """Close the handle and return to absent. Returns the released path."""
        with self._lock:
            path = self._path
            self._close_locked()
            return path

    def _close_locked(self) -> None:
        """Must hold self._lock."""
        file, self._file, self._path = self._file, None, None
        if file is not None and not file.closed:
            file.close()
