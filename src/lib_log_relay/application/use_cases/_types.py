"""Shared type aliases for the use case layer."""

from __future__ import annotations

from typing import Any, Protocol

from lib_log_relay.domain.levels import LogLevel

ProcessResult = dict[str, Any]


class ProcessCallable(Protocol):
    """Callable produced by :func:`create_process_log_entry`."""

    def __call__(self, *, level: LogLevel, tag: str, message: str, data: Any = None) -> ProcessResult: ...


__all__ = ["ProcessCallable", "ProcessResult"]
