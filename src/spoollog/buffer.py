"""
Pending-entry queue shared by every caller thread.

Entries leave only through drain_all(), as one ordered batch.
"""

import threading
from collections import deque
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class OverflowPolicy(str, Enum):
    """What append() does when a bounded queue is full."""
    BLOCK = "block"               # wait for a drain, then drop the new entry
    DROP_OLDEST = "drop_oldest"
    DROP_NEWEST = "drop_newest"


class EntryQueue(Generic[T]):
    """
    Thread-safe FIFO with atomic drain.

    capacity=None means unbounded. Entries discarded by the overflow
    policy are counted in `dropped`.
    """

    def __init__(
        self,
        capacity: int | None = None,
        overflow: OverflowPolicy | str = OverflowPolicy.DROP_OLDEST,
        block_timeout: float = 1.0,
    ):
        if capacity is not None and capacity < 1:
            raise ValueError(f"capacity must be >= 1 or None, got {capacity}")
        self.capacity = capacity
        self.overflow = OverflowPolicy(overflow)
        self.block_timeout = block_timeout
        self._items: deque[T] = deque()
        self._dropped = 0
        self._cond = threading.Condition(threading.Lock())

    def append(self, item: T, force: bool = False) -> bool:
        """
        Queue an item. Returns False if the overflow policy dropped it.

        force=True queues past capacity without dropping or waiting.
        """
        with self._cond:
            if not force and self._is_full():
                if self.overflow is OverflowPolicy.DROP_OLDEST:
                    self._items.popleft()
                    self._dropped += 1
                elif self.overflow is OverflowPolicy.DROP_NEWEST:
                    self._dropped += 1
                    return False
                else:
                    self._cond.wait_for(lambda: not self._is_full(), timeout=self.block_timeout)
                    if self._is_full():
                        self._dropped += 1
                        return False
            self._items.append(item)
            return True

    def drain_all(self) -> list[T]:
        """Remove and return every queued item in append order."""
        with self._cond:
            batch = list(self._items)
            self._items.clear()
            self._cond.notify_all()
        return batch

    def _is_full(self) -> bool:
        return self.capacity is not None and len(self._items) >= self.capacity

    @property
    def full(self) -> bool:
        with self._cond:
            return self._is_full()

    @property
    def dropped(self) -> int:
        return self._dropped

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0
