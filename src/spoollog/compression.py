"""
Gzip compression of closed log files.

The artifact is validated (decompressed and compared with the source)
before the source is deleted. On any failure the partial artifact is
removed and the source is left untouched.
"""

import gzip
import zlib
from pathlib import Path

from spoollog.errors import CompressionError

DEFAULT_SUFFIX = ".gz"


def artifact_path(source: Path, suffix: str = DEFAULT_SUFFIX) -> Path:
    """log_x.log → log_x.gz"""
    return source.with_suffix(suffix)


def compress_file(
    source: str | Path,
    suffix: str = DEFAULT_SUFFIX,
    level: int = 9,
    delete_source: bool = True,
) -> Path:
    """
    Write a gzip copy of `source` next to it and return the artifact path.

    Raises CompressionError; the source survives any failure.
    """
    source = Path(source)
    target = artifact_path(source, suffix)
    if target == source:
        raise CompressionError(f"Compressed suffix {suffix!r} would overwrite {source}")

    try:
        data = source.read_bytes()
        with gzip.open(target, "wb", compresslevel=level) as out:
            out.write(data)
        verify_artifact(target, data)
    except (OSError, EOFError, zlib.error) as e:
        target.unlink(missing_ok=True)
        if isinstance(e, CompressionError):
            raise
        raise CompressionError(f"Failed to compress {source}: {e}") from e

    if delete_source:
        try:
            source.unlink()
        except OSError as e:
            raise CompressionError(f"Compressed {source} but could not delete it: {e}") from e
    return target


def verify_artifact(target: Path, expected: bytes) -> None:
    """Raise CompressionError unless `target` decompresses to `expected`."""
    with gzip.open(target, "rb") as f:
        restored = f.read()
    if restored != expected:
        raise CompressionError(
            f"Artifact {target} does not match its source "
            f"({len(restored)} bytes restored, {len(expected)} expected)"
        )
