"""
Call-site resolution.

The logger asks a CallSiteResolver who called it and, for the structured
record, the full call chain. StackResolver walks the live interpreter
stack; StaticResolver returns fixed answers and keeps tests free of any
real stack dependency.
"""

import sys
from abc import ABC, abstractmethod
from types import FrameType, TracebackType
from typing import Iterable

from spoollog.records import Frame


# Frames from these module prefixes never appear in a call chain.
THREAD_INTERNALS = ("threading", "concurrent.futures")


class CallSiteResolver(ABC):
    """Identifies the immediate caller and its call chain."""

    @abstractmethod
    def caller(self) -> str:
        """Identity (class or module) of the first frame outside the logger."""
        ...

    @abstractmethod
    def call_chain(self) -> list[Frame]:
        """Frames of the current call chain, innermost first."""
        ...

    def exception_chain(self, exc: BaseException) -> list[Frame]:
        """Frames where `exc` travelled, innermost first, then the current chain."""
        return traceback_frames(exc.__traceback__) + self.call_chain()


class StackResolver(CallSiteResolver):
    """
    Resolves call sites from the interpreter stack.

    skip_modules: module prefixes treated as logger internals; the caller
    is the first frame outside them and they are left out of the chain.
    """

    def __init__(
        self,
        skip_modules: Iterable[str] = ("spoollog",),
        excluded_modules: Iterable[str] = THREAD_INTERNALS,
    ):
        self.skip_modules = tuple(skip_modules)
        self.excluded_modules = tuple(excluded_modules)

    def caller(self) -> str:
        frame = sys._getframe(1)
        try:
            while frame is not None:
                module = frame.f_globals.get("__name__", "")
                if not _matches(module, self.skip_modules):
                    return _frame_owner(frame)
                frame = frame.f_back
            return "<unknown>"
        finally:
            del frame

    def call_chain(self) -> list[Frame]:
        chain = []
        frame = sys._getframe(1)
        try:
            while frame is not None:
                module = frame.f_globals.get("__name__", "")
                if not _matches(module, self.skip_modules + self.excluded_modules):
                    chain.append(_to_frame(frame, frame.f_lineno))
                frame = frame.f_back
        finally:
            del frame
        return chain


class StaticResolver(CallSiteResolver):
    """Fixed caller and chain."""

    def __init__(self, caller: str = "static", chain: Iterable[Frame] = ()):
        self._caller = caller
        self._chain = list(chain)

    def caller(self) -> str:
        return self._caller

    def call_chain(self) -> list[Frame]:
        return list(self._chain)


# ── Helpers ───────────────────────────────────────────────────────────

def traceback_frames(tb: TracebackType | None) -> list[Frame]:
    """Frames of a traceback, innermost first."""
    frames = []
    while tb is not None:
        frames.append(_to_frame(tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    frames.reverse()
    return frames


def _matches(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(p + ".") for p in prefixes)


def _frame_owner(frame: FrameType) -> str:
    """module.Class for methods and classmethods, else the module name."""
    module = frame.f_globals.get("__name__", "<unknown>")
    f_locals = frame.f_locals
    if "self" in f_locals:
        owner = type(f_locals["self"])
        return f"{owner.__module__}.{owner.__qualname__}"
    if "cls" in f_locals and isinstance(f_locals["cls"], type):
        owner = f_locals["cls"]
        return f"{owner.__module__}.{owner.__qualname__}"
    return module


def _to_frame(frame: FrameType, lineno: int) -> Frame:
    return Frame(
        owner=_frame_owner(frame),
        function=frame.f_code.co_name,
        filename=frame.f_code.co_filename,
        lineno=lineno or 0,
    )
