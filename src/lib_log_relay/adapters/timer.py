"""asyncio implementation of :class:`TimerPort` and the system clock."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from lib_log_relay.application.ports.time import ClockPort, TimerHandle, TimerPort

LOGGER = logging.getLogger(__name__)


class SystemClock(ClockPort):
    """Concrete clock port returning timezone-aware UTC timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class _IntervalHandle(TimerHandle):
    """Repeating ``call_later`` chain mimicking ``setInterval``."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._interval, self._fire)
        try:
            self._callback()
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Interval callback raised; timer keeps running", exc_info=exc)

    @property
    def active(self) -> bool:
        """A handle whose loop has closed never fires again."""

        return not self._cancelled and not self._loop.is_closed()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioTimer(TimerPort):
    """Schedule intervals and background tasks on the running event loop.

    The loop is looked up lazily so a pipeline may be created before the host
    starts its loop; until then both operations report that nothing was
    scheduled.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task[Any]] = set()

    def _resolve_loop(self) -> asyncio.AbstractEventLoop | None:
        if self._loop is not None and not self._loop.is_closed():
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def start_interval(self, interval: float, callback: Callable[[], None]) -> TimerHandle | None:
        loop = self._resolve_loop()
        if loop is None:
            return None
        return _IntervalHandle(loop, interval, callback)

    def run_soon(self, factory: Callable[[], Awaitable[Any]]) -> bool:
        loop = self._resolve_loop()
        if loop is None:
            return False
        task = loop.create_task(_as_coroutine(factory))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def wait_idle(self) -> None:
        """Wait until every task started through :meth:`run_soon` finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


async def _as_coroutine(factory: Callable[[], Awaitable[Any]]) -> Any:
    return await factory()


__all__ = ["AsyncioTimer", "SystemClock"]
