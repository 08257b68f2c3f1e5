"""
SpoolLogger: buffered structured logger with rotating files.

One instance owns all shared state: the pending-entry queue, the active
log session, the last-flush timestamp and the redirect target. Every
entry point is safe to call from any number of threads, and none of the
logging paths (log, log_exception, flush, close) ever raises an I/O
error to the caller; failures go to the error channel instead.
"""

import sys
import threading
import time
import traceback
from pathlib import Path
from typing import IO, Any, Callable, Optional

from spoollog.buffer import EntryQueue, OverflowPolicy
from spoollog.callsite import CallSiteResolver, StackResolver
from spoollog.compression import compress_file
from spoollog.config import FlushMode, SpoolLogConfig
from spoollog.errors import (
    CompressionError,
    ErrorChannel,
    ErrorHandler,
    ErrorKind,
    RetentionError,
)
from spoollog.flusher import FlushTimer
from spoollog.formatters import ConsoleFormatter, EntryCodec, JsonCodec
from spoollog.records import Entry, Severity
from spoollog.retention import remove_old_logs
from spoollog.session import LogSession
from spoollog.sinks import RedirectTarget


class SpoolLogger:
    """
    Usage:
        log = SpoolLogger(SpoolLogConfig(directory="logs"))
        log.info("service started")
        try:
            ...
        except ValueError as e:
            raise log.log_exception(e)
        log.close()

    Hosts hold their own instances; SpoolLogger.instance() offers an
    optional process-wide default.
    """

    _instance: Optional["SpoolLogger"] = None
    _lock = threading.Lock()

    DEBUG = Severity.DEBUG
    INFO = Severity.INFO
    WARN = Severity.WARN
    ERROR = Severity.ERROR

    def __init__(
        self,
        config: SpoolLogConfig | None = None,
        resolver: CallSiteResolver | None = None,
        codec: EntryCodec | None = None,
        clock: Callable[[], float] | None = None,
        error_handlers: list[ErrorHandler] | None = None,
    ) -> None:
        self.config = config or SpoolLogConfig()
        self._resolver = resolver or StackResolver()
        self._codec = codec or JsonCodec()
        self._clock = clock or time.time
        self._errors = ErrorChannel(error_handlers)
        self._console = ConsoleFormatter(color=self.config.console.color)

        self._queue: EntryQueue[Entry] = EntryQueue(
            capacity=self.config.queue.capacity,
            overflow=self.config.queue.overflow,
            block_timeout=self.config.queue.block_timeout,
        )
        self._session = LogSession(self.config.directory, clock=self._clock)
        self._redirect = RedirectTarget()
        self._flush_lock = threading.RLock()
        self._last_flush_ms = self._now_millis()
        self._swept = False
        self._closed = False
        self._dropped_reported = 0

        self._timer: FlushTimer | None = None
        if self.config.flush.mode == FlushMode.TIMER:
            self._timer = FlushTimer(self.flush, self.config.flush.interval_ms / 1000)
            self._timer.start()

    @classmethod
    def from_config(cls, config: SpoolLogConfig, **kwargs: Any) -> "SpoolLogger":
        return cls(config, **kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path, **kwargs: Any) -> "SpoolLogger":
        return cls(SpoolLogConfig.from_yaml(path), **kwargs)

    @classmethod
    def instance(cls) -> "SpoolLogger":
        """Get or create the process-wide default instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Close and drop the default instance. For tests and shutdown hooks."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.close()
                cls._instance = None

    # ── Properties ────────────────────────────────────────────────

    @property
    def directory(self) -> Path:
        return self._session.directory

    @property
    def active_log_file(self) -> Path | None:
        return self._session.path

    def get_active_log_file(self) -> Path | None:
        return self._session.path

    @property
    def last_flush_millis(self) -> int:
        return self._last_flush_ms

    @property
    def pending(self) -> int:
        """Entries queued but not yet flushed."""
        return len(self._queue)

    @property
    def dropped(self) -> int:
        """Entries discarded by the queue overflow policy."""
        return self._queue.dropped

    # ── Error channel ─────────────────────────────────────────────

    def add_error_handler(self, handler: ErrorHandler) -> None:
        self._errors.add(handler)

    def remove_error_handler(self, handler: ErrorHandler) -> bool:
        return self._errors.remove(handler)

    # ── Core logging ──────────────────────────────────────────────

    def log(self, severity: Severity | int | str, payload: Any) -> None:
        """
        Log a message. `payload` is text, or a dict/list/bytes value that is
        stringified first.

        Writes one console line now and queues the structured entry. The
        entry reaches disk on the next flush: every interval in timer mode,
        or from this call once the interval has elapsed in inline mode.
        """
        severity = Severity.from_value(severity)
        self._ensure_session()

        entry = Entry.create(
            severity,
            payload,
            call_site=self._resolver.caller(),
            call_chain=self._resolver.call_chain(),
            timestamp=self._clock(),
        )
        stream = sys.stderr if severity >= Severity.ERROR else sys.stdout
        self._write_console(self._console.format(entry), stream)
        if self._flushes_inline() and self._queue.overflow is OverflowPolicy.BLOCK and self._queue.full:
            # No timer will drain a full blocking queue; make room here
            self.flush()
        self._queue.append(entry)

        if self._flushes_inline() and self._now_millis() - self._last_flush_ms >= self.config.flush.interval_ms:
            self.flush()

    def debug(self, payload: Any) -> None:
        self.log(Severity.DEBUG, payload)

    def info(self, payload: Any) -> None:
        self.log(Severity.INFO, payload)

    def warn(self, payload: Any) -> None:
        self.log(Severity.WARN, payload)

    def error(self, payload: Any) -> None:
        self.log(Severity.ERROR, payload)

    def log_exception(self, exc: BaseException | None) -> BaseException | None:
        """
        Log an exception and flush immediately, bypassing the timer.

        Returns `exc` unchanged so the caller can still raise it; None is a no-op.
        """
        if exc is None:
            return None
        self._ensure_session()

        entry = Entry.from_exception(
            exc,
            call_site=self._resolver.caller(),
            call_chain=self._resolver.exception_chain(exc),
            timestamp=self._clock(),
        )
        self._write_console(self._console.format_exception(entry), sys.stderr)
        self._write_console(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip("\n"),
            sys.stderr,
        )

        with self._flush_lock:
            self._flush_locked()
            # Other threads may refill a bounded queue after the drain
            self._queue.append(entry, force=True)
            self._flush_locked()
        return exc

    # ── Flush ─────────────────────────────────────────────────────

    def flush(self) -> int:
        """Move every queued entry to the active sinks. Returns the count drained."""
        with self._flush_lock:
            return self._flush_locked()

    def _flush_locked(self) -> int:
        """Must hold self._flush_lock."""
        batch = self._queue.drain_all()
        self._mark_flushed()
        self._report_overflow()
        if not batch:
            return 0

        write_file = not self._redirect.suppress_file
        if write_file and not self._session.is_open:
            self._generate_log()

        for entry in batch:
            line = self._codec.encode(entry)
            if write_file and self._session.is_open:
                try:
                    self._session.write(line)
                except OSError as e:
                    self._errors.report(
                        ErrorKind.WRITE, "Failed to write entry to log file", e, self._session.path
                    )
            if self._redirect.attached:
                try:
                    self._redirect.write(line)
                except Exception as e:
                    self._errors.report(ErrorKind.WRITE, "Failed to write entry to redirect target", e)
        return len(batch)

    def _report_overflow(self) -> None:
        """One OVERFLOW report per flush interval in which entries were dropped."""
        dropped = self._queue.dropped
        lost = dropped - self._dropped_reported
        if lost <= 0:
            return
        self._dropped_reported = dropped
        self._errors.report(
            ErrorKind.OVERFLOW,
            f"Log queue full (capacity {self._queue.capacity}, policy {self._queue.overflow.value}); "
            f"dropped {lost} entries",
        )

    def _flushes_inline(self) -> bool:
        return self._timer is None or not self._timer.running

    def _mark_flushed(self) -> None:
        self._last_flush_ms = max(self._last_flush_ms, self._now_millis())

    # ── Session / rotation ────────────────────────────────────────

    def _ensure_session(self) -> None:
        if self._session.is_open:
            return
        with self._flush_lock:
            # Double-check after acquiring lock
            if not self._session.is_open:
                self._generate_log()

    def _generate_log(self) -> Path | None:
        """Open a new session file; sweeps retention before the very first one."""
        if not self._swept:
            self._swept = True
            if self.config.retention.on_startup:
                self._startup_sweep()
        try:
            path = self._session.generate()
        except OSError as e:
            self._errors.report(ErrorKind.ROTATION, "Failed to create log file", e, self.directory)
            return None
        # Logging after close() reopens the logger
        self._closed = False
        return path

    def _startup_sweep(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            # generate() reports the directory failure
            return
        try:
            self.remove_old_logs()
        except RetentionError:
            pass

    def rotate(self) -> Path | None:
        """Flush, then start a new session file. Returns its path."""
        with self._flush_lock:
            self._flush_locked()
            return self._generate_log()

    # ── Redirect ──────────────────────────────────────────────────

    def redirect_output(self, stream: IO[Any] | None, suppress_file_logging: bool = False) -> None:
        """
        Send flushed entries to `stream` as well, or only to it when
        `suppress_file_logging` is set. None detaches the stream.
        """
        with self._flush_lock:
            self._redirect.set(stream, suppress_file_logging)

    # ── Maintenance ───────────────────────────────────────────────

    def compress_logs(self) -> Path | None:
        """
        Flush, then gzip the active log file and end the session.

        Returns the artifact path, or None when no session is open. Raises
        CompressionError; on failure the original file and the session are
        left intact.
        """
        with self._flush_lock:
            self._flush_locked()
            path = self._session.path
            if path is None:
                return None
            cfg = self.config.compression
            try:
                artifact = compress_file(path, suffix=cfg.suffix, level=cfg.level, delete_source=False)
            except CompressionError as e:
                self._errors.report(ErrorKind.COMPRESSION, "Failed to compress log file", e, path)
                raise

            self._session.release()
            try:
                path.unlink()
            except OSError as e:
                self._errors.report(ErrorKind.COMPRESSION, "Compressed log file could not be deleted", e, path)
                raise CompressionError(f"Compressed {path} but could not delete it: {e}") from e
            return artifact

    def compress_stale_logs(self) -> list[Path]:
        """Compress leftover .log files other than the active one."""
        active = self._session.path
        try:
            candidates = sorted(self.directory.glob(f"*{self._session.suffix}"))
        except OSError as e:
            self._errors.report(ErrorKind.COMPRESSION, "Cannot list log directory", e, self.directory)
            return []

        artifacts = []
        cfg = self.config.compression
        for path in candidates:
            if path == active or not path.is_file():
                continue
            try:
                artifacts.append(compress_file(path, suffix=cfg.suffix, level=cfg.level))
            except CompressionError as e:
                self._errors.report(ErrorKind.COMPRESSION, "Failed to compress stale log file", e, path)
        return artifacts

    def remove_old_logs(
        self,
        max_age_days: int | None = None,
        size_threshold: int | None = None,
    ) -> list[Path]:
        """
        Delete files in the log directory older than `max_age_days` or
        larger than `size_threshold` blocks (config retention.size_block_bytes
        bytes each). The active log file is never deleted.

        Raises RetentionError if the directory cannot be listed.
        """
        cfg = self.config.retention
        active = self._session.path
        try:
            return remove_old_logs(
                self.directory,
                max_age_days=cfg.max_age_days if max_age_days is None else max_age_days,
                size_threshold=cfg.size_threshold if size_threshold is None else size_threshold,
                size_block_bytes=cfg.size_block_bytes,
                now=self._clock(),
                exclude=[active] if active is not None else [],
                on_error=lambda p, e: self._errors.report(
                    ErrorKind.RETENTION, "Failed to remove old log file", e, p
                ),
            )
        except RetentionError as e:
            self._errors.report(ErrorKind.RETENTION, "Cannot list log directory", e, self.directory)
            raise

    # ── Status ────────────────────────────────────────────────────

    def status(self) -> dict:
        return {
            "directory": str(self.directory),
            "active_log_file": str(self._session.path) if self._session.path else None,
            "flush_mode": self.config.flush.mode.value,
            "flush_interval_ms": self.config.flush.interval_ms,
            "timer_running": self._timer is not None and self._timer.running,
            "last_flush_millis": self._last_flush_ms,
            "pending": len(self._queue),
            "dropped": self._queue.dropped,
            "queue_capacity": self._queue.capacity,
            "redirect_attached": self._redirect.attached,
            "file_logging_suppressed": self._redirect.suppress_file,
            "closed": self._closed,
        }

    # ── Cleanup ───────────────────────────────────────────────────

    def close(self) -> None:
        """
        Stop the timer, flush, and close the active file. Idempotent.

        Not terminal: a later log() opens a new session and flushes inline.
        """
        if self._timer is not None:
            self._timer.stop()
        with self._flush_lock:
            self._flush_locked()
            self._session.release()
            self._closed = True

    def __enter__(self) -> "SpoolLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Helpers ───────────────────────────────────────────────────

    def _now_millis(self) -> int:
        return round(self._clock() * 1000)

    def _write_console(self, text: str, stream: IO[str]) -> None:
        if not self.config.console.enabled:
            return
        try:
            print(text, file=stream, flush=True)
        except (OSError, ValueError) as e:
            self._errors.report(ErrorKind.WRITE, "Failed to write console line", e)
