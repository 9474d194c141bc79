"""Console port describing local echo of log entries."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_relay.domain.events import LogEntry


@runtime_checkable
class ConsolePort(Protocol):
    """Render a log entry to an interactive console."""

    def emit(self, entry: LogEntry, *, colorize: bool) -> None:
        """Render ``entry`` with optional colour control."""


__all__ = ["ConsolePort"]
