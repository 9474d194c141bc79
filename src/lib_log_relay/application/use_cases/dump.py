"""Use case exporting buffered entries through a dump adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from lib_log_relay.application.ports.dump import DumpPort
from lib_log_relay.domain import RingBuffer
from lib_log_relay.domain.dump import DumpFormat
from lib_log_relay.domain.levels import LogLevel


def create_capture_dump(
    *,
    ring_buffer: RingBuffer,
    dump_port: DumpPort,
) -> Callable[..., str]:
    """Return a callable rendering the current ring buffer contents.

    Examples
    --------
    >>> class DummyDump:
    ...     def __init__(self):
    ...         self.calls = []
    ...     def dump(self, entries, *, dump_format, path=None, min_level=None):
    ...         self.calls.append((len(list(entries)), dump_format, path, min_level))
    ...         return 'payload'
    >>> ring = RingBuffer(max_entries=5)
    >>> dump_port = DummyDump()
    >>> capture = create_capture_dump(ring_buffer=ring, dump_port=dump_port)
    >>> capture(dump_format=DumpFormat.TEXT)
    'payload'
    >>> dump_port.calls[0][1] is DumpFormat.TEXT
    True
    """

    def capture(
        *,
        dump_format: DumpFormat,
        path: Path | None = None,
        min_level: LogLevel | None = None,
    ) -> str:
        return dump_port.dump(ring_buffer.snapshot(), dump_format=dump_format, path=path, min_level=min_level)

    return capture


__all__ = ["create_capture_dump"]
