"""
Independent periodic flush trigger.

Decouples flush cadence from call volume: caller threads only append,
the timer thread moves entries to disk every interval.
"""

import threading
from typing import Callable


class FlushTimer:
    """Daemon thread calling `flush` every `interval_seconds` until stopped."""

    def __init__(self, flush: Callable[[], object], interval_seconds: float, name: str = "spoollog-flush"):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        self._flush = flush
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._started = False

    def start(self) -> None:
        if not self._started:
            self._started = True
            self._thread.start()

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self._flush()
            except Exception:
                # flush reports its own failures; keep ticking regardless
                pass

    def stop(self, timeout: float = 5.0) -> None:
        """Stop ticking. Does not flush; the owner does a final flush."""
        self._stop_event.set()
        if self._started and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
