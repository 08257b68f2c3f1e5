"""
Redirect target: an alternate output stream attachable at runtime.

The stream reference is only read or replaced under the target's lock,
so a flush never writes to a stream that is mid-replacement.
"""

import io
import threading
from typing import IO, Any


class RedirectTarget:
    """Optional stream plus a flag suppressing file writes while active."""

    def __init__(self) -> None:
        self._stream: IO[Any] | None = None
        self._suppress_file = False
        self._lock = threading.Lock()

    def set(self, stream: IO[Any] | None, suppress_file: bool = False) -> None:
        """Attach (or detach with None) the stream and set file suppression."""
        with self._lock:
            self._stream = stream
            self._suppress_file = suppress_file

    @property
    def attached(self) -> bool:
        return self._stream is not None

    @property
    def suppress_file(self) -> bool:
        return self._suppress_file

    def write(self, line: str) -> bool:
        """
        Write one line to the attached stream. Returns False when nothing
        is attached. Raises whatever the stream raises.
        """
        with self._lock:
            stream = self._stream
            if stream is None:
                return False
            text = line if line.endswith("\n") else line + "\n"
            if _is_binary(stream):
                stream.write(text.encode("utf-8"))
            else:
                stream.write(text)
            stream.flush()
            return True


def _is_binary(stream: IO[Any]) -> bool:
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    if isinstance(stream, io.TextIOBase):
        return False
    return "b" in getattr(stream, "mode", "")
