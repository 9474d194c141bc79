"""Ring buffer storing the most recent log entries.

Purpose
-------
Provide in-memory retention for recent entries so operators can inspect and
export state without relying on the remote collector.

Contents
--------
* :class:`RingBuffer` with iteration and snapshot helpers.

System Role
-----------
Receives every entry regardless of level; feeds :func:`export_logs` and the
dump adapter. Independent of delivery.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator

from .events import LogEntry


class RingBuffer:
    """Fixed-size buffer retaining the most recent :class:`LogEntry` objects."""

    def __init__(self, *, max_entries: int) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._buffer: Deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        """Return the configured buffer size."""

        return self._max_entries

    def append(self, entry: LogEntry) -> None:
        """Append an entry, evicting the oldest one when full."""

        self._buffer.append(entry)

    def snapshot(self) -> list[LogEntry]:
        """Return a copy of the current buffer state."""

        return list(self._buffer)

    def __iter__(self) -> Iterator[LogEntry]:
        """Iterate over buffered entries from oldest to newest."""
        return iter(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        """Remove all buffered entries."""
        self._buffer.clear()


__all__ = ["RingBuffer"]
