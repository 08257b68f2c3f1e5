"""
Durability failure reporting.

Failures on the logging path are never raised to the host. They become
ErrorReports delivered to registered handlers; the default handler
prints a diagnostic to stderr.
"""

import sys
import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable


class ErrorKind(str, Enum):
    ROTATION = "rotation"         # directory or file creation
    WRITE = "write"               # file or redirect write during flush
    COMPRESSION = "compression"
    RETENTION = "retention"
    OVERFLOW = "overflow"         # entries dropped by a full queue


class SpoolLogError(Exception):
    """Base for errors signalled by explicit maintenance operations."""


class CompressionError(SpoolLogError, OSError):
    """compress_logs() could not produce a valid artifact."""


class RetentionError(SpoolLogError, OSError):
    """remove_old_logs() could not list the log directory."""


@dataclass(frozen=True)
class ErrorReport:
    kind: ErrorKind
    message: str
    error: BaseException | None = None
    path: Path | None = None

    def describe(self) -> str:
        where = f" [{self.path}]" if self.path else ""
        cause = f": {self.error!r}" if self.error is not None else ""
        return f"[spoollog:{self.kind.value}]{where} {self.message}{cause}"


ErrorHandler = Callable[[ErrorReport], None]


def stderr_handler(report: ErrorReport) -> None:
    """Default handler: one diagnostic line plus the traceback, if any."""
    print(report.describe(), file=sys.stderr, flush=True)
    if report.error is not None and report.error.__traceback__ is not None:
        traceback.print_exception(
            type(report.error), report.error, report.error.__traceback__, file=sys.stderr
        )


class ErrorChannel:
    """Fan-out of ErrorReports to handlers. A failing handler is skipped."""

    def __init__(self, handlers: list[ErrorHandler] | None = None):
        self._handlers: list[ErrorHandler] = list(handlers) if handlers is not None else [stderr_handler]

    def add(self, handler: ErrorHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def remove(self, handler: ErrorHandler) -> bool:
        try:
            self._handlers.remove(handler)
            return True
        except ValueError:
            return False

    @property
    def handlers(self) -> list[ErrorHandler]:
        return list(self._handlers)

    def report(
        self,
        kind: ErrorKind,
        message: str,
        error: BaseException | None = None,
        path: Path | None = None,
    ) -> ErrorReport:
        report = ErrorReport(kind=kind, message=message, error=error, path=path)
        for handler in list(self._handlers):
            try:
                handler(report)
            except Exception:
                # Reporting must never crash the caller
                pass
        return report
