"""
Tests for the retention sweep.
"""

import os
import time

import pytest

from spoollog.errors import RetentionError
from spoollog.retention import MILLIS_PER_DAY, remove_old_logs

DAY = 24 * 60 * 60


def _make(directory, name, size=10, age_days=0.0, now=None):
    path = directory / name
    path.write_bytes(b"x" * size)
    if age_days:
        mtime = (now or time.time()) - age_days * DAY
        os.utime(path, (mtime, mtime))
    return path


class TestRemoveOldLogs:
    def test_age_and_size_thresholds(self, tmp_path):
        now = time.time()
        old = _make(tmp_path, "old.log", age_days=61, now=now)
        fresh = _make(tmp_path, "fresh.log", age_days=59, now=now)
        big = _make(tmp_path, "big.log", size=2048 * 5001)
        at_limit = _make(tmp_path, "at_limit.log", size=2048 * 5000 + 2047)

        removed = remove_old_logs(tmp_path, 60, 5000, now=now)

        assert sorted(removed) == sorted([old, big])
        assert fresh.exists()
        assert at_limit.exists()
        assert not old.exists()
        assert not big.exists()

    def test_zero_days_removes_fresh_file(self, tmp_path):
        path = _make(tmp_path, "log_new.log")
        # Any nonzero age exceeds a 0-day limit
        removed = remove_old_logs(tmp_path, 0, 999999, now=time.time() + 0.5)
        assert removed == [path]

    def test_exact_age_boundary_kept(self, tmp_path):
        now = 1_700_000_000.0
        path = _make(tmp_path, "edge.log")
        mtime = now - MILLIS_PER_DAY / 1000
        os.utime(path, (mtime, mtime))
        assert remove_old_logs(tmp_path, 1, 5000, now=now) == []

    def test_custom_block_size(self, tmp_path):
        path = _make(tmp_path, "mb.log", size=3 * 1024 * 1024)
        assert remove_old_logs(tmp_path, 60, 2, size_block_bytes=1024 * 1024) == [path]

    def test_not_recursive(self, tmp_path):
        sub = tmp_path / "archive"
        sub.mkdir()
        nested = _make(sub, "old.log", age_days=100)
        assert remove_old_logs(tmp_path, 60, 5000) == []
        assert nested.exists()
        assert sub.exists()

    def test_excluded_paths_survive(self, tmp_path):
        keep = _make(tmp_path, "active.log", age_days=100)
        assert remove_old_logs(tmp_path, 60, 5000, exclude=[keep]) == []
        assert keep.exists()

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(RetentionError):
            remove_old_logs(tmp_path / "missing", 60, 5000)

    def test_retention_error_is_oserror(self, tmp_path):
        with pytest.raises(OSError):
            remove_old_logs(tmp_path / "missing", 60, 5000)

    def test_invalid_block_size(self, tmp_path):
        with pytest.raises(ValueError):
            remove_old_logs(tmp_path, 60, 5000, size_block_bytes=0)

    def test_delete_failure_reported_and_skipped(self, tmp_path, monkeypatch):
        bad = _make(tmp_path, "a.log", age_days=100)
        good = _make(tmp_path, "b.log", age_days=100)
        original_unlink = type(bad).unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == "a.log":
                raise PermissionError("locked")
            return original_unlink(self, *args, **kwargs)

        monkeypatch.setattr(type(bad), "unlink", flaky_unlink)
        failures = []
        removed = remove_old_logs(tmp_path, 60, 5000, on_error=lambda p, e: failures.append(p))
        assert removed == [good]
        assert failures == [bad]
        assert bad.exists()
