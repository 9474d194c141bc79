"""Use cases composing the relay pipeline."""

from __future__ import annotations

from .admission import create_admission, resolve_enrichment
from .dump import create_capture_dump
from .flush import FlushScheduler, SchedulerState
from .process_event import create_process_log_entry
from .shutdown import create_shutdown, create_teardown

__all__ = [
    "FlushScheduler",
    "SchedulerState",
    "create_admission",
    "create_capture_dump",
    "create_process_log_entry",
    "create_shutdown",
    "create_teardown",
    "resolve_enrichment",
]
