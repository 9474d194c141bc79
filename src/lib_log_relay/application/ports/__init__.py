"""Protocols describing the boundaries between the relay core and adapters."""

from __future__ import annotations

from .console import ConsolePort
from .dump import DumpPort
from .enrichment import EnrichmentPort
from .lifecycle import LifecycleSignalPort
from .time import ClockPort, TimerHandle, TimerPort
from .transport import TransportPort

__all__ = [
    "ClockPort",
    "ConsolePort",
    "DumpPort",
    "EnrichmentPort",
    "LifecycleSignalPort",
    "TimerHandle",
    "TimerPort",
    "TransportPort",
]
