from __future__ import annotations

import threading
from collections import deque
from typing import Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


class RecordQueue(Generic[T]):
    """Ordered buffer of records not yet acknowledged by Kinesis.

    ``drain_all`` is atomic with respect to ``append``: a record appended
    concurrently lands either in the drained snapshot or in the queue,
    never in both and never lost. Bounding is the flush scheduler's job.
    """

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: deque[T] = deque(items or ())
        # Protect _items across the event loop and any producer threads
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    @property
    def size(self) -> int:
        return len(self._items)

    def append(self, record: T) -> int:
        """Add to the tail; returns the new length for the threshold check."""
        with self._lock:
            self._items.append(record)
            return len(self._items)

    def drain_all(self, limit: Optional[int] = None) -> list[T]:
        """Remove and return queued records, oldest first.

        With ``limit`` only the first ``limit`` records are taken; the rest
        stay queued in order.
        """
        with self._lock:
            if limit is None or limit >= len(self._items):
                drained = list(self._items)
                self._items.clear()
                return drained
            return [self._items.popleft() for _ in range(max(limit, 0))]

    def requeue_subset(self, records: Iterable[T]) -> None:
        """Return failed records ahead of anything appended since they were drained."""
        with self._lock:
            self._items.extendleft(reversed(list(records)))

    def snapshot(self) -> list[T]:
        with self._lock:
            return list(self._items)
