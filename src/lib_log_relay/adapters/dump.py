"""Dump adapter supporting text and JSON exports of the ring buffer.

Outputs
-------
* Text: one line per entry,
  ``<iso timestamp> [LEVEL] [SOURCE] [TAG] message | <json data>``.
* JSON: array of :meth:`LogEntry.to_dict` objects.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from lib_log_relay.application.ports.dump import DumpPort
from lib_log_relay.domain.dump import DumpFormat
from lib_log_relay.domain.events import LogEntry
from lib_log_relay.domain.levels import LogLevel


class DumpAdapter(DumpPort):
    """Render ring buffer snapshots into text or JSON."""

    def dump(
        self,
        entries: Sequence[LogEntry],
        *,
        dump_format: DumpFormat,
        path: Path | None = None,
        min_level: LogLevel | None = None,
    ) -> str:
        selected = [entry for entry in entries if min_level is None or entry.level >= min_level]
        if dump_format is DumpFormat.JSON:
            payload = json.dumps([entry.to_dict() for entry in selected], indent=2)
        else:
            payload = "\n".join(self._format_text(entry) for entry in selected)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")
        return payload

    @staticmethod
    def _format_text(entry: LogEntry) -> str:
        line = f"{entry.timestamp.isoformat()} [{entry.level.name}] [{entry.source}] [{entry.tag}] {entry.message}"
        if entry.data:
            line += f" | {json.dumps(dict(entry.data))}"
        return line


__all__ = ["DumpAdapter"]
