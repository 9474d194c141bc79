"""Composition root wiring domain, application, and adapters into a pipeline.

Purpose
-------
Translate :class:`RelaySettings` plus optional injected ports into a live
:class:`TelemetryPipeline`. Each collaborator defaults to its production
adapter; tests inject fakes for the transport, timer, clock, and lifecycle.

System Role
-----------
The only module that knows concrete adapter classes; the application layer
sees ports exclusively.
"""

from __future__ import annotations

from typing import Callable

from lib_log_relay.adapters import (
    AsyncioTimer,
    DumpAdapter,
    HttpxTransport,
    RichConsoleAdapter,
    SessionStoreEnrichment,
    SystemClock,
)
from lib_log_relay.application.ports import (
    ClockPort,
    ConsolePort,
    DumpPort,
    EnrichmentPort,
    LifecycleSignalPort,
    TimerPort,
    TransportPort,
)
from lib_log_relay.application.use_cases import (
    FlushScheduler,
    create_admission,
    create_capture_dump,
    create_process_log_entry,
    create_shutdown,
    create_teardown,
)
from lib_log_relay.application.use_cases._diagnostics import DiagnosticHook, build_diagnostic_emitter
from lib_log_relay.config import RelaySettings
from lib_log_relay.domain import DeliveryQueue, RingBuffer

from ._pipeline import TelemetryPipeline


def build_pipeline(
    settings: RelaySettings,
    *,
    transport: TransportPort | None = None,
    enrichment: EnrichmentPort | None = None,
    timer: TimerPort | None = None,
    clock: ClockPort | None = None,
    lifecycle: LifecycleSignalPort | None = None,
    console: ConsolePort | None = None,
    dump: DumpPort | None = None,
    diagnostic_hook: DiagnosticHook = None,
    on_close: Callable[[], None] | None = None,
) -> TelemetryPipeline:
    """Assemble a pipeline from resolved settings and optional port overrides."""

    emit = build_diagnostic_emitter(diagnostic_hook)
    ring_buffer = RingBuffer(max_entries=settings.max_local)
    queue = DeliveryQueue(max_records=settings.max_queue)
    transport = transport if transport is not None else _create_transport(settings)
    enrichment = enrichment if enrichment is not None else SessionStoreEnrichment()
    timer = timer if timer is not None else AsyncioTimer()
    clock = clock if clock is not None else SystemClock()

    scheduler = FlushScheduler(
        queue=queue,
        transport=transport,
        timer=timer,
        interval=settings.flush_interval,
        emit=emit,
    )
    admit = create_admission(
        queue=queue,
        enrichment=enrichment,
        client_version=settings.client_version,
        emit=emit,
    )
    process = create_process_log_entry(
        ring_buffer=ring_buffer,
        admit=admit,
        scheduler=scheduler,
        enrichment=enrichment,
        clock=clock,
        console=_select_console(settings, console),
        console_level=settings.console_level,
        server_level=settings.server_level,
        emit=emit,
    )
    if lifecycle is not None:
        lifecycle.on_hidden(scheduler.on_visibility_hidden)
        lifecycle.on_teardown(scheduler.teardown)

    tasks = timer if callable(getattr(timer, "wait_idle", None)) else None
    return TelemetryPipeline(
        settings=settings,
        process=process,
        ring_buffer=ring_buffer,
        queue=queue,
        scheduler=scheduler,
        capture_dump=create_capture_dump(ring_buffer=ring_buffer, dump_port=dump if dump is not None else DumpAdapter()),
        teardown=create_teardown(scheduler=scheduler),
        shutdown_async=create_shutdown(scheduler=scheduler, transport=transport, tasks=tasks),  # type: ignore[arg-type]
        on_close=on_close,
    )


def _create_transport(settings: RelaySettings) -> HttpxTransport:
    return HttpxTransport(
        settings.endpoint,
        timeout=settings.request_timeout,
        beacon_timeout=settings.beacon_timeout,
    )


def _select_console(settings: RelaySettings, console: ConsolePort | None) -> ConsolePort | None:
    if console is not None:
        return console
    if not settings.console_enabled:
        return None
    return RichConsoleAdapter()


__all__ = ["build_pipeline"]
