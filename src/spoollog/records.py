"""
Entry records and severity definitions.

An Entry is fixed at construction. The console line and the structured
file record are two renderings of the same Entry.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Iterable


class Severity(IntEnum):
    """Entry severities, Python-logging compatible numeric values."""
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        """Resolve severity from string name, case-insensitive."""
        name_upper = name.strip().upper()
        if name_upper == "WARNING":
            name_upper = "WARN"
        try:
            return cls[name_upper]
        except KeyError:
            raise ValueError(
                f"Unknown severity '{name}'. "
                f"Valid severities: {', '.join(m.name for m in cls)}"
            )

    @classmethod
    def from_value(cls, value: "int | str | Severity") -> "Severity":
        """Resolve severity from an int, a name or a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_name(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(
                    f"No severity with value {value}. "
                    f"Valid values: {', '.join(f'{m.name}={m.value}' for m in cls)}"
                )
        raise TypeError(f"Expected int or str, got {type(value).__name__}")


DATE_LABEL_FORMAT = "%m_%d_%Y"
NULL_MESSAGE = "null"


@dataclass(frozen=True)
class Frame:
    """One resolved call-chain frame."""
    owner: str          # module-qualified class, or module for plain functions
    function: str
    filename: str = ""
    lineno: int = 0

    @property
    def dedupe_key(self) -> str:
        return f"{self.lineno}:{self.owner}#{self.function}"

    def signature(self) -> str:
        """Summary form: owner#function:lineno"""
        return f"{self.owner}#{self.function}:{self.lineno}"

    def __str__(self) -> str:
        return f"{self.owner}.{self.function}({self.filename}:{self.lineno})"


def dedupe_frames(frames: Iterable[Frame]) -> tuple[Frame, ...]:
    """Collapse frames sharing line+owner+function. First occurrence wins."""
    seen: set[str] = set()
    unique = []
    for frame in frames:
        if frame.dedupe_key in seen:
            continue
        seen.add(frame.dedupe_key)
        unique.append(frame)
    return tuple(unique)


def stringify_payload(payload: Any) -> str:
    """
    Turn a log payload into message text.

    str passes through; dict/list/tuple are JSON encoded; bytes become a
    JSON array of byte values; anything else is str()-ed.
    """
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return json.dumps(list(bytes(payload)))
    if isinstance(payload, (dict, list, tuple)):
        return json.dumps(payload, default=str)
    return str(payload)


@dataclass(frozen=True)
class Entry:
    """
    Immutable log entry. Created by SpoolLogger.log() / log_exception(),
    rendered once to the console and queued for the file sinks.
    """
    severity: Severity
    message: str
    timestamp_millis: int
    date_label: str
    call_site: str
    call_chain: tuple[Frame, ...] = field(default_factory=tuple)
    exception_type: str | None = None
    exception_message: str | None = None
    summary: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_exception(self) -> bool:
        return self.exception_type is not None

    @classmethod
    def create(
        cls,
        severity: "Severity | int | str",
        payload: Any,
        call_site: str,
        call_chain: Iterable[Frame] = (),
        timestamp: float | None = None,
    ) -> "Entry":
        """Factory with payload stringification and timestamp labels."""
        ts = _resolve_timestamp(timestamp)
        return cls(
            severity=Severity.from_value(severity),
            message=stringify_payload(payload),
            timestamp_millis=round(ts * 1000),
            date_label=datetime.fromtimestamp(ts).strftime(DATE_LABEL_FORMAT),
            call_site=call_site,
            call_chain=tuple(call_chain),
        )

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        call_site: str,
        call_chain: Iterable[Frame] = (),
        timestamp: float | None = None,
    ) -> "Entry":
        """ERROR entry for an exception; the summary collapses duplicate frames."""
        ts = _resolve_timestamp(timestamp)
        chain = tuple(call_chain)
        text = str(exc) or NULL_MESSAGE
        return cls(
            severity=Severity.ERROR,
            message=text,
            timestamp_millis=round(ts * 1000),
            date_label=datetime.fromtimestamp(ts).strftime(DATE_LABEL_FORMAT),
            call_site=call_site,
            call_chain=chain,
            exception_type=type(exc).__name__,
            exception_message=text,
            summary=tuple(f.signature() for f in dedupe_frames(chain)),
        )


def _resolve_timestamp(timestamp: float | None) -> float:
    if timestamp is None:
        return datetime.now().timestamp()
    return timestamp
