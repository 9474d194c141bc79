"""Domain entry describing one structured log event.

Purpose
-------
Provide an immutable, serialisable representation of log entries travelling
from the caller into the local ring buffer and, when admitted, towards the
delivery queue.

Contents
--------
* :class:`LogEntry` dataclass with helper methods.
* :func:`extract_fault` for pulling exception metadata out of payloads.
* :func:`view_from_path` deriving the originating view from a location path.

System Role
-----------
Sits in the domain layer; ingestion builds entries, buffers store them, and
admission projects them into :class:`~lib_log_relay.domain.records.DeliveryRecord`.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from .levels import LogLevel

UNKNOWN_SOURCE = "UNKNOWN"


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogEntry:
    """Immutable log entry captured at log time.

    Attributes
    ----------
    timestamp:
        Creation instant in timezone-aware UTC.
    level:
        :class:`LogLevel` severity.
    source:
        Originating view/page identifier (``"ATTENDANCE"``, ``"INDEX"``).
    tag:
        Caller-supplied category used for filtering and API sub-categories.
    message:
        Human-readable text.
    data:
        Optional read-only structured payload (already JSON-safe).
    exception_type, stack_trace:
        Populated only for ``ERROR`` entries whose payload was a captured fault.
    """

    timestamp: datetime
    level: LogLevel
    source: str
    tag: str
    message: str
    data: Mapping[str, Any] | None = None
    exception_type: str | None = None
    stack_trace: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))
        if self.data is not None:
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def epoch_millis(self) -> int:
        """Return the timestamp as integer milliseconds since the epoch."""

        return int(self.timestamp.timestamp() * 1000)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the entry with an ISO8601 timestamp."""

        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "source": self.source,
            "tag": self.tag,
            "message": self.message,
            "data": dict(self.data) if self.data is not None else None,
        }
        if self.exception_type is not None:
            data["exception_type"] = self.exception_type
            data["stack_trace"] = self.stack_trace
        return data


def extract_fault(data: Any) -> tuple[str, str] | None:
    """Return ``(exception_type, stack_trace)`` when ``data`` is a captured fault.

    A fault is either an exception instance or a mapping carrying a ``stack``
    entry. The type comes from ``exception_type`` or ``exceptionType`` and
    defaults to ``"Error"``.

    Examples
    --------
    >>> extract_fault({"stack": "at main()", "exception_type": "TypeError"})
    ('TypeError', 'at main()')
    >>> extract_fault({"stack": "at fetch()", "exceptionType": "NetworkError"})
    ('NetworkError', 'at fetch()')
    >>> extract_fault({"status": 500}) is None
    True
    """

    if isinstance(data, BaseException):
        stack = "".join(traceback.format_exception(type(data), data, data.__traceback__))
        return type(data).__name__, stack
    if isinstance(data, Mapping) and data.get("stack"):
        exception_type = data.get("exception_type") or data.get("exceptionType") or "Error"
        return str(exception_type), str(data["stack"])
    return None


def view_from_path(path: str | None) -> str:
    """Derive the view identifier from a navigation path.

    Examples
    --------
    >>> view_from_path("/web/attendance.html")
    'ATTENDANCE'
    >>> view_from_path("/")
    'INDEX'
    """

    if path is None:
        return UNKNOWN_SOURCE
    page = path.rstrip("\n").split("?", 1)[0].split("/")[-1] or "index.html"
    return page.replace(".html", "").upper()


__all__ = ["LogEntry", "UNKNOWN_SOURCE", "extract_fault", "view_from_path"]
