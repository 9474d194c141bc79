"""Export formats for the local ring buffer.

Used by :meth:`TelemetryPipeline.export_logs` and the ``export`` CLI command.
``TEXT`` yields one line per entry; ``JSON`` yields an indented array of
:meth:`LogEntry.to_dict` objects.
"""

from __future__ import annotations

from enum import Enum


class DumpFormat(Enum):
    """Ring buffer export format.

    Examples
    --------
    >>> DumpFormat.from_name('  JSON ') is DumpFormat.JSON
    True
    >>> DumpFormat.from_name('yaml')
    Traceback (most recent call last):
    ...
    ValueError: Unsupported dump format: 'yaml' (expected text or json)
    """

    TEXT = "text"
    JSON = "json"

    @classmethod
    def from_name(cls, name: str) -> "DumpFormat":
        try:
            return _BY_VALUE[name.strip().lower()]
        except KeyError:
            choices = " or ".join(_BY_VALUE)
            raise ValueError(f"Unsupported dump format: {name!r} (expected {choices})") from None


_BY_VALUE = {member.value: member for member in DumpFormat}


__all__ = ["DumpFormat"]
