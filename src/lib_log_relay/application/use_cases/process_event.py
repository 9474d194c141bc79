"""Use case orchestrating ingestion of a single log entry.

Purpose
-------
Tie together entry creation, ring buffer retention, console echo, and
delivery admission. The returned callable is what ``log()`` invokes for
every call site in the instrumented application.

Contents
--------
* :func:`create_process_log_entry` factory returning the runtime callable.
* Small helpers, one per pipeline step.

System Role
-----------
Application-layer orchestrator invoked by :class:`~lib_log_relay.runtime.TelemetryPipeline`.
It must never block and never raise: any unexpected failure is logged through
the module logger and reported as ``{"ok": False}``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lib_log_relay.application.ports import ClockPort, ConsolePort, EnrichmentPort
from lib_log_relay.domain import LogEntry, LogLevel, RingBuffer
from lib_log_relay.domain.events import UNKNOWN_SOURCE, extract_fault, view_from_path
from lib_log_relay.domain.records import DeliveryRecord

from ._diagnostics import Emit
from ._payload import sanitize_payload
from ._types import ProcessCallable, ProcessResult
from .flush import FlushScheduler

logger = logging.getLogger(__name__)


def create_process_log_entry(
    *,
    ring_buffer: RingBuffer,
    admit: Callable[[LogEntry], DeliveryRecord],
    scheduler: FlushScheduler,
    enrichment: EnrichmentPort,
    clock: ClockPort,
    console: ConsolePort | None,
    console_level: LogLevel,
    server_level: LogLevel,
    emit: Emit,
    colorize_console: bool = True,
) -> ProcessCallable:
    """Build the ingestion callable capturing the current dependency wiring.

    Parameters
    ----------
    ring_buffer:
        :class:`RingBuffer` receiving every entry.
    admit:
        Admission callable from :func:`create_admission`.
    scheduler:
        :class:`FlushScheduler` notified about admitted records.
    enrichment:
        Source of the current navigation path (entry ``source``).
    clock:
        Provider of timezone-aware timestamps.
    console:
        Optional console adapter; ``None`` disables echo.
    console_level, server_level:
        Minimum levels for console echo and delivery admission.
    emit:
        Guarded diagnostic emitter.

    Returns
    -------
    ProcessCallable
        Function accepting ``level``, ``tag``, ``message`` and optional
        ``data`` and returning a small result dictionary.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_relay.domain import DeliveryQueue
    >>> class Clock:
    ...     def now(self):
    ...         return datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc)
    >>> class Enrichment:
    ...     def current_view(self):
    ...         return "/attendance.html"
    >>> class Scheduler:
    ...     def __init__(self):
    ...         self.records = []
    ...     def on_admitted(self, record):
    ...         self.records.append(record)
    >>> ring = RingBuffer(max_entries=10)
    >>> queue = DeliveryQueue(max_records=10)
    >>> scheduler = Scheduler()
    >>> process = create_process_log_entry(
    ...     ring_buffer=ring,
    ...     admit=lambda entry: queue.append(entry) or entry,
    ...     scheduler=scheduler,
    ...     enrichment=Enrichment(),
    ...     clock=Clock(),
    ...     console=None,
    ...     console_level=LogLevel.DEBUG,
    ...     server_level=LogLevel.INFO,
    ...     emit=lambda name, payload: None,
    ... )
    >>> process(level=LogLevel.DEBUG, tag="UI_STATE", message="menu: open")["admitted"]
    False
    >>> process(level=LogLevel.INFO, tag="PAGE_LOAD", message="attendance loaded")["admitted"]
    True
    >>> len(ring), len(queue), ring.snapshot()[0].source
    (2, 1, 'ATTENDANCE')
    """

    toolkit = _PipelineToolkit(
        ring_buffer=ring_buffer,
        admit=admit,
        scheduler=scheduler,
        enrichment=enrichment,
        clock=clock,
        console=console,
        console_level=console_level,
        server_level=server_level,
        emit=emit,
        colorize_console=colorize_console,
    )
    return _ProcessPipeline(toolkit)


@dataclass(frozen=True)
class _PipelineToolkit:
    ring_buffer: RingBuffer
    admit: Callable[[LogEntry], DeliveryRecord]
    scheduler: FlushScheduler
    enrichment: EnrichmentPort
    clock: ClockPort
    console: ConsolePort | None
    console_level: LogLevel
    server_level: LogLevel
    emit: Emit
    colorize_console: bool


class _ProcessPipeline(ProcessCallable):
    def __init__(self, toolkit: _PipelineToolkit) -> None:
        self._toolkit = toolkit

    def __call__(self, *, level: LogLevel, tag: str, message: str, data: Any = None) -> ProcessResult:
        try:
            entry = _craft_entry(self._toolkit, level, tag, message, data)
            _remember_entry(self._toolkit, entry)
            _echo_entry(self._toolkit, entry)
            if entry.level < self._toolkit.server_level:
                return {"ok": True, "admitted": False}
            record = _admit_entry(self._toolkit, entry)
            _notify_scheduler(self._toolkit, record)
        except Exception as exc:  # noqa: BLE001
            logger.error("Log pipeline failed; entry dropped", exc_info=exc)
            return {"ok": False, "reason": "pipeline_error"}
        return {"ok": True, "admitted": True}


def _craft_entry(toolkit: _PipelineToolkit, level: LogLevel, tag: str, message: str, data: Any) -> LogEntry:
    fault = extract_fault(data) if level is LogLevel.ERROR else None
    return LogEntry(
        timestamp=toolkit.clock.now(),
        level=level,
        source=_resolve_source(toolkit),
        tag=str(tag),
        message=str(message),
        data=sanitize_payload(data, toolkit.emit),
        exception_type=fault[0] if fault else None,
        stack_trace=fault[1] if fault else None,
    )


def _resolve_source(toolkit: _PipelineToolkit) -> str:
    try:
        return view_from_path(toolkit.enrichment.current_view())
    except Exception as exc:  # noqa: BLE001
        logger.debug("Navigation lookup failed; source unknown", exc_info=exc)
        return UNKNOWN_SOURCE


def _remember_entry(toolkit: _PipelineToolkit, entry: LogEntry) -> None:
    toolkit.ring_buffer.append(entry)


def _echo_entry(toolkit: _PipelineToolkit, entry: LogEntry) -> None:
    if toolkit.console is None or entry.level < toolkit.console_level:
        return
    try:
        toolkit.console.emit(entry, colorize=toolkit.colorize_console)
    except Exception as exc:  # noqa: BLE001
        logger.error("Console adapter raised; continuing", exc_info=exc)
        toolkit.emit("console_error", {"tag": entry.tag, "exception": repr(exc)})


def _admit_entry(toolkit: _PipelineToolkit, entry: LogEntry) -> DeliveryRecord:
    return toolkit.admit(entry)


def _notify_scheduler(toolkit: _PipelineToolkit, record: DeliveryRecord) -> None:
    toolkit.scheduler.on_admitted(record)


__all__ = ["create_process_log_entry"]
