"""Domain entities and value objects used by the telemetry relay."""

from __future__ import annotations

from .delivery_queue import DeliveryQueue
from .dump import DumpFormat
from .enrichment import EnrichmentSnapshot
from .events import LogEntry
from .levels import LogLevel
from .records import DeliveryRecord
from .ring_buffer import RingBuffer

__all__ = [
    "DeliveryQueue",
    "DeliveryRecord",
    "DumpFormat",
    "EnrichmentSnapshot",
    "LogEntry",
    "LogLevel",
    "RingBuffer",
]
