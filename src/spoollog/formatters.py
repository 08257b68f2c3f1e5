"""
Entry renderings.

  - console:    "[{severity}] [{call_site}] ({timestamp_millis}) {message}"
  - exception:  "[ERROR] [{call_site}] [{timestamp_millis}] Found Error: {message}" + chain summary
  - json:       one structured record per line for the file and redirect sinks
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from spoollog.records import Entry, Severity


class EntryCodec(ABC):
    """Serializes entries for the durable sinks. One entry per line."""

    @abstractmethod
    def encode(self, entry: Entry) -> str: ...

    @abstractmethod
    def decode(self, line: str) -> dict[str, Any]: ...


class JsonCodec(EntryCodec):
    """
    Structured JSON record. Regular and exception entries share one
    schema; exception-only keys are present only on exception entries.
    """

    def encode(self, entry: Entry) -> str:
        obj: dict[str, Any] = {
            "message": entry.message,
            "severity": entry.severity.name,
            "date": entry.date_label,
            "systemtime": entry.timestamp_millis,
            "callingClass": entry.call_site,
            "stack": [str(frame) for frame in entry.call_chain],
        }
        if entry.is_exception:
            obj["exceptionType"] = entry.exception_type
            obj["exceptionMessage"] = entry.exception_message
            obj["summary"] = list(entry.summary)
        return json.dumps(obj, default=str)

    def decode(self, line: str) -> dict[str, Any]:
        return json.loads(line)


class ConsoleFormatter:
    """Terse console rendering, optionally ANSI colored."""

    COLORS = {
        Severity.DEBUG: "\033[36m",    # cyan
        Severity.INFO: "\033[37m",     # white/default
        Severity.WARN: "\033[33m",     # yellow
        Severity.ERROR: "\033[31m",    # red
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = False):
        self.color = color

    def format(self, entry: Entry) -> str:
        line = f"[{entry.severity.name}] [{entry.call_site}] ({entry.timestamp_millis}) {entry.message}"
        return self._paint(entry.severity, line)

    def format_exception(self, entry: Entry) -> str:
        """Multi-line diagnostic with the deduplicated chain summary."""
        header = (
            f"[{entry.severity.name}] [{entry.call_site}] [{entry.timestamp_millis}] "
            f"Found Error: {entry.exception_message}"
        )
        lines = [header] + [f"    at {signature}" for signature in entry.summary]
        return self._paint(entry.severity, "\n".join(lines))

    def _paint(self, severity: Severity, text: str) -> str:
        if not self.color:
            return text
        return f"{self.COLORS.get(severity, '')}{text}{self.RESET}"
