"""Wire-shaped delivery records and the batch encoding sent to the collector.

Purpose
-------
Project a :class:`LogEntry` plus admission-time enrichment into the exact
payload the collector's ``POST /logs`` endpoint accepts.

Contents
--------
* :class:`DeliveryRecord` - frozen record with :meth:`DeliveryRecord.to_wire`.
* :func:`encode_batch` - JSON body ``{"logs": [...]}`` for one delivery attempt.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .enrichment import EnrichmentSnapshot
from .events import LogEntry
from .levels import LogLevel

WIRE_SOURCE = "WEB"


@dataclass(slots=True, frozen=True)
class DeliveryRecord:
    """One log entry as queued for delivery.

    Attributes
    ----------
    timestamp_ms:
        Entry creation instant as integer epoch milliseconds.
    level, tag, message:
        Copied from the originating entry.
    user_id, user_display_name, user_role, device_descriptor:
        Enrichment resolved when the entry was admitted.
    client_version:
        Version string of the instrumented client.
    exception_type, stack_trace:
        Fault metadata for ``ERROR`` entries carrying a captured fault.
    """

    timestamp_ms: int
    level: LogLevel
    tag: str
    message: str
    user_id: str | None
    user_display_name: str | None
    user_role: str
    device_descriptor: str
    client_version: str
    exception_type: str | None = None
    stack_trace: str | None = None

    @classmethod
    def from_entry(cls, entry: LogEntry, enrichment: EnrichmentSnapshot, *, client_version: str) -> "DeliveryRecord":
        return cls(
            timestamp_ms=entry.epoch_millis,
            level=entry.level,
            tag=entry.tag,
            message=entry.message,
            user_id=enrichment.user_id,
            user_display_name=enrichment.user_display_name,
            user_role=enrichment.user_role,
            device_descriptor=enrichment.device_descriptor,
            client_version=client_version,
            exception_type=entry.exception_type if entry.level is LogLevel.ERROR else None,
            stack_trace=entry.stack_trace if entry.level is LogLevel.ERROR else None,
        )

    def to_wire(self) -> dict[str, Any]:
        """Return the collector's JSON object for this record.

        Examples
        --------
        >>> record = DeliveryRecord(0, LogLevel.WARN, "T", "m", None, None, "UNKNOWN", "Unknown (Unknown)", "web-1.0.0")
        >>> wire = record.to_wire()
        >>> wire["level"], wire["source"], "exceptionType" in wire
        ('WARN', 'WEB', False)
        """

        payload: dict[str, Any] = {
            "timestamp": self.timestamp_ms,
            "level": self.level.wire_name,
            "tag": self.tag,
            "message": self.message,
            "source": WIRE_SOURCE,
            "bguUsername": self.user_id,
            "userFullName": self.user_display_name,
            "userRole": self.user_role,
            "deviceInfo": self.device_descriptor,
            "appVersion": self.client_version,
        }
        if self.exception_type is not None:
            payload["exceptionType"] = self.exception_type
            payload["stackTrace"] = self.stack_trace or ""
        return payload


def encode_batch(records: Sequence[DeliveryRecord]) -> bytes:
    """Serialize ``records`` into the collector request body."""

    return json.dumps({"logs": [record.to_wire() for record in records]}).encode("utf-8")


__all__ = ["DeliveryRecord", "WIRE_SOURCE", "encode_batch"]
