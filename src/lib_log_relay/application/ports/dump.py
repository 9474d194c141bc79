"""Dump port defining ring-buffer export contracts."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from lib_log_relay.domain.dump import DumpFormat
from lib_log_relay.domain.events import LogEntry
from lib_log_relay.domain.levels import LogLevel


@runtime_checkable
class DumpPort(Protocol):
    """Export buffered entries to text or JSON.

    Examples
    --------
    >>> class Recorder:
    ...     def dump(self, entries, *, dump_format, path=None, min_level=None):
    ...         return f"{len(list(entries))}:{dump_format.value}"
    >>> isinstance(Recorder(), DumpPort)
    True
    >>> Recorder().dump([], dump_format=DumpFormat.TEXT)
    '0:text'
    """

    def dump(
        self,
        entries: Sequence[LogEntry],
        *,
        dump_format: DumpFormat,
        path: Path | None = None,
        min_level: LogLevel | None = None,
    ) -> str:
        """Render ``entries`` according to the requested format."""


__all__ = ["DumpPort"]
