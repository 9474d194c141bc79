"""Client-side telemetry buffering and delivery relay.

Public API
----------
* :func:`create_pipeline` - compose an owned :class:`TelemetryPipeline`.
* :class:`RelaySettings`, :func:`build_settings` - configuration.
* :class:`LogLevel`, :class:`LogEntry`, :class:`DumpFormat` - domain values.
* :class:`ProcessLifecycle` - atexit/SIGTERM teardown hooks.
"""

from __future__ import annotations

from . import __init__conf__
from .adapters import HttpxTransport, ProcessLifecycle, RichConsoleAdapter, SessionStoreEnrichment
from .application.use_cases import SchedulerState
from .config import RelaySettings, build_settings
from .domain import DumpFormat, LogEntry, LogLevel
from .runtime import TagLogger, TelemetryPipeline, api_tag, create_pipeline, summary_info

__version__ = __init__conf__.version

__all__ = [
    "DumpFormat",
    "HttpxTransport",
    "LogEntry",
    "LogLevel",
    "ProcessLifecycle",
    "RelaySettings",
    "RichConsoleAdapter",
    "SchedulerState",
    "SessionStoreEnrichment",
    "TagLogger",
    "TelemetryPipeline",
    "api_tag",
    "build_settings",
    "create_pipeline",
    "summary_info",
]
