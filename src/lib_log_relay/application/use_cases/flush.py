"""Flush scheduler deciding when the delivery queue is shipped.

Purpose
-------
Drive delivery of the :class:`DeliveryQueue` through three states:

``IDLE``
    No timer armed; the queue may still hold records.
``WAITING``
    Interval timer armed; waiting for a tick or an out-of-band trigger.
``FLUSHING``
    One interactive send in flight. Every further trigger is a no-op.

Triggers are the interval tick, admission of an ``ERROR`` record, and the
host becoming hidden. Teardown bypasses ``FLUSHING`` entirely: the remaining
queue goes to the transport's beacon and the timer is cancelled.

Contents
--------
* :class:`SchedulerState` enum.
* :class:`FlushScheduler` implementing the state machine.

System Role
-----------
The ``FLUSHING`` state is the sole mutual exclusion protecting the queue;
everything runs on one event loop so interleavings, not races, are the
concern. A snapshot leaves the queue the moment a send begins and lives in
:attr:`FlushScheduler.in_flight` until its outcome is known.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum

from lib_log_relay.application.ports.time import TimerHandle, TimerPort
from lib_log_relay.application.ports.transport import TransportPort
from lib_log_relay.domain.delivery_queue import DeliveryQueue
from lib_log_relay.domain.levels import LogLevel
from lib_log_relay.domain.records import DeliveryRecord

from ._diagnostics import Emit

LOGGER = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    WAITING = "waiting"
    FLUSHING = "flushing"


class FlushScheduler:
    """Coordinate interval, error, visibility, and teardown flushes."""

    def __init__(
        self,
        *,
        queue: DeliveryQueue,
        transport: TransportPort,
        timer: TimerPort,
        interval: float,
        emit: Emit,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._queue = queue
        self._transport = transport
        self._timer = timer
        self._interval = interval
        self._emit = emit
        self._state = SchedulerState.IDLE
        self._timer_handle: TimerHandle | None = None
        self._in_flight: tuple[DeliveryRecord, ...] = ()
        self._closed = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def in_flight(self) -> tuple[DeliveryRecord, ...]:
        """Records handed to the transport whose outcome is still pending."""

        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------ triggers

    def on_admitted(self, record: DeliveryRecord) -> None:
        """React to a freshly admitted record."""

        if self._closed:
            return
        self._ensure_timer()
        if record.level is LogLevel.ERROR:
            self.trigger("error")

    def on_visibility_hidden(self) -> None:
        self.trigger("hidden")

    def trigger(self, reason: str) -> bool:
        """Start a background interactive send unless one is already running.

        Returns ``True`` when a send was started.
        """

        snapshot = self._begin(reason)
        if snapshot is None:
            return False
        if not self._timer.run_soon(lambda: self._deliver(snapshot)):
            LOGGER.debug("No event loop available; keeping %d records queued", len(snapshot))
            self._in_flight = ()
            self._queue.requeue(snapshot)
            self._settle()
            return False
        return True

    async def flush(self, reason: str = "manual") -> bool:
        """Run one interactive send and await its outcome.

        Returns ``False`` when nothing was sent (empty queue, send already in
        flight, or scheduler closed) or when the send failed.
        """

        snapshot = self._begin(reason)
        if snapshot is None:
            return False
        return await self._deliver(snapshot)

    def _on_tick(self) -> None:
        if self._state is SchedulerState.FLUSHING or self._closed:
            return
        if not self._queue:
            self._go_idle()
            return
        self.trigger("timer")

    # ------------------------------------------------------------------ teardown

    def teardown(self) -> int:
        """Hand the queue to the beacon and stop scheduling; return records handed off.

        Runs synchronously and never raises. An interactive send still in
        flight is not awaited: if it fails afterwards its batch is lost.
        """

        self._closed = True
        self._cancel_timer()
        snapshot = self._queue.drain()
        if snapshot:
            try:
                self._transport.beacon(snapshot)
            except Exception as exc:  # noqa: BLE001
                LOGGER.debug("Teardown beacon failed; %d records lost", len(snapshot), exc_info=exc)
                self._emit("beacon_failed", {"records": len(snapshot), "exception": repr(exc)})
            else:
                self._emit("beacon_sent", {"records": len(snapshot)})
        if self._state is not SchedulerState.FLUSHING:
            self._state = SchedulerState.IDLE
        return len(snapshot)

    # ------------------------------------------------------------------ internals

    def _begin(self, reason: str) -> tuple[DeliveryRecord, ...] | None:
        if self._closed or self._state is SchedulerState.FLUSHING:
            return None
        if not self._queue:
            return None
        snapshot = self._queue.drain()
        self._in_flight = snapshot
        self._state = SchedulerState.FLUSHING
        self._emit("flush_started", {"reason": reason, "records": len(snapshot)})
        return snapshot

    async def _deliver(self, snapshot: Sequence[DeliveryRecord]) -> bool:
        try:
            delivered = bool(await self._transport.send(snapshot))
        except asyncio.CancelledError:
            self._complete(snapshot, False)
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Error sending logs to collector: %s", exc)
            delivered = False
        self._complete(snapshot, delivered)
        return delivered

    def _complete(self, snapshot: Sequence[DeliveryRecord], delivered: bool) -> None:
        self._in_flight = ()
        if delivered:
            self._emit("flush_succeeded", {"records": len(snapshot)})
        elif self._closed:
            self._emit("flush_lost", {"records": len(snapshot)})
        else:
            trimmed = self._queue.requeue(snapshot)
            self._emit("flush_failed", {"records": len(snapshot), "queued": len(self._queue)})
            if trimmed:
                self._emit("requeue_trimmed", {"records": len(trimmed)})
        self._settle()

    def _settle(self) -> None:
        if self._closed:
            self._state = SchedulerState.IDLE
            return
        if self._queue:
            self._ensure_timer()
            self._state = SchedulerState.WAITING if self._timer_handle is not None else SchedulerState.IDLE
        else:
            self._go_idle()

    def _ensure_timer(self) -> None:
        if self._timer_handle is not None:
            if self._timer_handle.active:
                return
            LOGGER.debug("Interval timer no longer running; re-arming")
            self._timer_handle = None
        handle = self._timer.start_interval(self._interval, self._on_tick)
        if handle is None:
            LOGGER.debug("Timer unavailable; flush interval not armed")
            return
        self._timer_handle = handle
        if self._state is SchedulerState.IDLE:
            self._state = SchedulerState.WAITING

    def _go_idle(self) -> None:
        self._cancel_timer()
        self._state = SchedulerState.IDLE

    def _cancel_timer(self) -> None:
        handle, self._timer_handle = self._timer_handle, None
        if handle is None:
            return
        try:
            handle.cancel()
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("Timer cancellation failed", exc_info=exc)


__all__ = ["FlushScheduler", "SchedulerState"]
