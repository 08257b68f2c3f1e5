"""
Retention sweep over the log directory.

A file is deleted when it is older than max_age_days, or when its size
counted in size_block_bytes blocks (2048 by default) exceeds
size_threshold. A max_age_days of 0 deletes any file with nonzero age.
"""

import time
from pathlib import Path
from typing import Callable, Iterable

from spoollog.errors import RetentionError

MILLIS_PER_DAY = 24 * 60 * 60 * 1000
DEFAULT_BLOCK_BYTES = 2048


def is_expired(
    path: Path,
    now_millis: float,
    max_age_days: int,
    size_threshold: int,
    size_block_bytes: int = DEFAULT_BLOCK_BYTES,
) -> bool:
    st = path.stat()
    age_millis = now_millis - st.st_mtime * 1000
    if age_millis > max_age_days * MILLIS_PER_DAY:
        return True
    return st.st_size // size_block_bytes > size_threshold


def remove_old_logs(
    directory: str | Path,
    max_age_days: int,
    size_threshold: int,
    size_block_bytes: int = DEFAULT_BLOCK_BYTES,
    now: float | None = None,
    exclude: Iterable[Path] = (),
    on_error: Callable[[Path, OSError], None] | None = None,
) -> list[Path]:
    """
    Delete expired files directly inside `directory`. Returns deleted paths.

    Raises RetentionError if the directory cannot be listed. A file that
    cannot be inspected or deleted is passed to on_error and skipped.
    """
    if size_block_bytes < 1:
        raise ValueError(f"size_block_bytes must be >= 1, got {size_block_bytes}")

    directory = Path(directory)
    now_millis = (time.time() if now is None else now) * 1000
    skip = {Path(p).resolve() for p in exclude}

    try:
        candidates = sorted(directory.iterdir())
    except OSError as e:
        raise RetentionError(f"Cannot list log directory {directory}: {e}") from e

    removed = []
    for path in candidates:
        try:
            if not path.is_file() or path.resolve() in skip:
                continue
            if is_expired(path, now_millis, max_age_days, size_threshold, size_block_bytes):
                path.unlink()
                removed.append(path)
        except OSError as e:
            if on_error is not None:
                on_error(path, e)
    return removed
