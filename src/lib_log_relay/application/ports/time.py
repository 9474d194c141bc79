"""Ports for time, timers, and cooperative task scheduling."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Provide the current timestamp."""

    def now(self) -> datetime: ...


@runtime_checkable
class TimerHandle(Protocol):
    """Handle returned by :meth:`TimerPort.start_interval`."""

    @property
    def active(self) -> bool:
        """``False`` once cancelled or once the host can no longer fire it."""

    def cancel(self) -> None: ...


@runtime_checkable
class TimerPort(Protocol):
    """Host timer primitive plus a way to start background coroutines.

    Both methods return a falsy value when the host cannot schedule work (for
    example when no event loop is running); callers treat that as "try again
    on the next trigger".
    """

    def start_interval(self, interval: float, callback: Callable[[], None]) -> TimerHandle | None:
        """Invoke ``callback`` every ``interval`` seconds until cancelled."""

    def run_soon(self, factory: Callable[[], Awaitable[Any]]) -> bool:
        """Start the coroutine produced by ``factory`` without awaiting it."""


__all__ = ["ClockPort", "TimerHandle", "TimerPort"]
