"""Adapter implementations for the relay ports."""

from __future__ import annotations

from .console import RichConsoleAdapter
from .dump import DumpAdapter
from .enrichment import SessionStoreEnrichment
from .lifecycle import ProcessLifecycle
from .timer import AsyncioTimer, SystemClock
from .transport import HttpxTransport

__all__ = [
    "AsyncioTimer",
    "DumpAdapter",
    "HttpxTransport",
    "ProcessLifecycle",
    "RichConsoleAdapter",
    "SessionStoreEnrichment",
    "SystemClock",
]
