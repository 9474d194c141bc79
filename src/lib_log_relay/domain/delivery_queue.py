"""Bounded FIFO of records awaiting remote delivery.

Purpose
-------
Hold the most recent ``max_records`` delivery records in admission order.
Overflow always evicts the oldest record, whether it is caused by a new
admission or by a failed batch being put back in front of newer records.

Contents
--------
* :class:`DeliveryQueue` with ``append``/``drain``/``requeue`` operations.

System Role
-----------
Shared by admission (producer) and the flush scheduler (consumer). The
scheduler's ``FLUSHING`` guard is the only thing preventing two overlapping
drains.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, Sequence

from .records import DeliveryRecord


class DeliveryQueue:
    """Most-recent-N buffer of :class:`DeliveryRecord` objects.

    Examples
    --------
    >>> queue = DeliveryQueue(max_records=2)
    >>> len(queue), queue.max_records
    (0, 2)
    """

    def __init__(self, *, max_records: int) -> None:
        if max_records <= 0:
            raise ValueError("max_records must be positive")
        self._max_records = max_records
        self._records: Deque[DeliveryRecord] = deque()

    @property
    def max_records(self) -> int:
        return self._max_records

    def append(self, record: DeliveryRecord) -> DeliveryRecord | None:
        """Append ``record``; return the evicted oldest record when at capacity."""

        evicted = None
        if len(self._records) >= self._max_records:
            evicted = self._records.popleft()
        self._records.append(record)
        return evicted

    def drain(self) -> tuple[DeliveryRecord, ...]:
        """Return an immutable snapshot of all records and clear the queue."""

        snapshot = tuple(self._records)
        self._records.clear()
        return snapshot

    def requeue(self, snapshot: Sequence[DeliveryRecord]) -> list[DeliveryRecord]:
        """Prepend ``snapshot`` ahead of newer records and re-apply capacity.

        Returns the records trimmed from the head of the combined sequence.
        """

        combined = list(snapshot) + list(self._records)
        overflow = max(0, len(combined) - self._max_records)
        trimmed = combined[:overflow]
        self._records = deque(combined[overflow:])
        return trimmed

    def snapshot(self) -> list[DeliveryRecord]:
        """Return a copy of the queued records without clearing them."""

        return list(self._records)

    def __iter__(self) -> Iterator[DeliveryRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)


__all__ = ["DeliveryQueue"]
