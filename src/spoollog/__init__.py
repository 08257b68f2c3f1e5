"""
spoollog: process-embedded structured logger.

Terse console lines, buffered JSON records, rotating log files,
gzip compression and a retention sweep.
"""

from spoollog.core import SpoolLogger
from spoollog.records import Entry, Frame, Severity
from spoollog.buffer import EntryQueue, OverflowPolicy
from spoollog.callsite import CallSiteResolver, StackResolver, StaticResolver
from spoollog.config import SpoolLogConfig, FlushMode
from spoollog.errors import (
    CompressionError,
    ErrorKind,
    ErrorReport,
    RetentionError,
    SpoolLogError,
)
from spoollog.formatters import EntryCodec, JsonCodec, ConsoleFormatter

__all__ = [
    "SpoolLogger",
    "Entry",
    "Frame",
    "Severity",
    "EntryQueue",
    "OverflowPolicy",
    "CallSiteResolver",
    "StackResolver",
    "StaticResolver",
    "SpoolLogConfig",
    "FlushMode",
    "CompressionError",
    "ErrorKind",
    "ErrorReport",
    "RetentionError",
    "SpoolLogError",
    "EntryCodec",
    "JsonCodec",
    "ConsoleFormatter",
]
