"""Teardown and graceful shutdown orchestration.

Purpose
-------
Provide the two ways the relay stops:

* ``teardown`` - synchronous, for page unload / process termination. Hands
  the queue to the beacon and cancels the timer; nothing is awaited.
* ``shutdown`` - asynchronous, for hosts that still own a running loop. Lets
  any in-flight send settle, attempts one last interactive flush, then runs
  ``teardown`` for whatever is left and releases the transport.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from lib_log_relay.application.ports.transport import TransportPort

from .flush import FlushScheduler


class _Drainable(Protocol):
    async def wait_idle(self) -> None: ...


def create_teardown(*, scheduler: FlushScheduler) -> Callable[[], int]:
    """Return the synchronous teardown callable."""

    def teardown() -> int:
        return scheduler.teardown()

    return teardown


def create_shutdown(
    *,
    scheduler: FlushScheduler,
    transport: TransportPort,
    tasks: _Drainable | None = None,
) -> Callable[[], Awaitable[None]]:
    """Return an async callable performing the graceful shutdown sequence."""

    async def shutdown() -> None:
        """Settle in-flight sends, flush once more, tear down, close transport."""
        if tasks is not None:
            await tasks.wait_idle()
        if not scheduler.closed:
            await scheduler.flush("shutdown")
        scheduler.teardown()
        await transport.aclose()

    return shutdown


__all__ = ["create_shutdown", "create_teardown"]
