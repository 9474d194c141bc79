"""Runtime façade creating owned telemetry pipelines.

Purpose
-------
Expose :func:`create_pipeline`, the one entry point host applications use
instead of importing the inner layers. Configuration inputs (a prepared
:class:`RelaySettings` or keyword overrides, plus ``LOG_RELAY_*`` environment
variables) become a composed :class:`TelemetryPipeline`.

Contents
--------
* :func:`create_pipeline` - composition entry point.
* :class:`TelemetryPipeline`, :class:`TagLogger` - returned façade objects.
* :func:`summary_info` - metadata banner shared with the CLI.

System Role
-----------
Outer shell of the clean-architecture layout. Unlike a module-level
singleton, each call returns an independent pipeline with its own buffers;
callers own its lifecycle and end it with ``shutdown`` or ``shutdown_async``.
"""

from __future__ import annotations

from typing import Any

from lib_log_relay.adapters import ProcessLifecycle
from lib_log_relay.application.ports import (
    ClockPort,
    ConsolePort,
    DumpPort,
    EnrichmentPort,
    LifecycleSignalPort,
    TimerPort,
    TransportPort,
)
from lib_log_relay.application.use_cases._diagnostics import DiagnosticHook
from lib_log_relay.config import RelaySettings, build_settings

from ._composition import build_pipeline
from ._pipeline import TagLogger, TelemetryPipeline, api_tag


def create_pipeline(
    settings: RelaySettings | None = None,
    *,
    transport: TransportPort | None = None,
    enrichment: EnrichmentPort | None = None,
    timer: TimerPort | None = None,
    clock: ClockPort | None = None,
    lifecycle: LifecycleSignalPort | None = None,
    console: ConsolePort | None = None,
    dump: DumpPort | None = None,
    diagnostic_hook: DiagnosticHook = None,
    install_process_hooks: bool = False,
    **overrides: Any,
) -> TelemetryPipeline:
    """Compose a new telemetry pipeline.

    Parameters
    ----------
    settings:
        Prepared settings; when ``None`` they are resolved through
        :func:`build_settings` from ``overrides`` and the environment.
    transport, enrichment, timer, clock, console, dump:
        Optional port implementations replacing the production adapters.
    lifecycle:
        Source of visibility/teardown notifications. When omitted and
        ``install_process_hooks`` is ``True`` a :class:`ProcessLifecycle` is
        created and hooked to :mod:`atexit` and ``SIGTERM``.
    diagnostic_hook:
        Optional ``(name, payload)`` callback receiving pipeline milestones.
    **overrides:
        Keyword arguments accepted by :func:`build_settings`.

    Raises
    ------
    ValueError
        When settings are invalid or ``overrides`` accompany ``settings``.

    Examples
    --------
    >>> pipeline = create_pipeline(console_enabled=False)
    >>> pipeline.info("BOOT", "client started")["admitted"]
    True
    >>> pipeline.queue_size(), pipeline.scheduler_state().name
    (1, 'IDLE')
    >>> pipeline.clear_logs()
    >>> [entry.message for entry in pipeline.get_logs()]
    ['Logs cleared']
    """

    if settings is None:
        settings = build_settings(**overrides)
    elif overrides:
        raise ValueError(f"Unexpected overrides alongside settings: {sorted(overrides)}")

    on_close = None
    if lifecycle is None and install_process_hooks:
        process_lifecycle = ProcessLifecycle()
        process_lifecycle.install()
        lifecycle = process_lifecycle
        on_close = process_lifecycle.uninstall

    return build_pipeline(
        settings,
        transport=transport,
        enrichment=enrichment,
        timer=timer,
        clock=clock,
        lifecycle=lifecycle,
        console=console,
        dump=dump,
        diagnostic_hook=diagnostic_hook,
        on_close=on_close,
    )


def summary_info() -> str:
    """Return the metadata banner used by the CLI ``info`` command."""

    from .. import __init__conf__

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


__all__ = [
    "RelaySettings",
    "TagLogger",
    "TelemetryPipeline",
    "api_tag",
    "build_settings",
    "create_pipeline",
    "summary_info",
]
