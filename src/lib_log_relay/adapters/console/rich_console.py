"""Rich-powered console adapter implementing :class:`ConsolePort`.

Purpose
-------
Echo every entry locally with a per-level colour, the way the web client's
developer console showed them, so operators see activity without waiting for
the collector.

Contents
--------
* :data:`_STYLE_MAP` - default level-to-style mapping.
* :class:`RichConsoleAdapter` - adapter constructed by the composition root.
"""

from __future__ import annotations

from typing import Mapping, MutableMapping

from rich.console import Console

from lib_log_relay.application.ports.console import ConsolePort
from lib_log_relay.domain.events import LogEntry
from lib_log_relay.domain.levels import LogLevel


_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "blue",
    LogLevel.WARN: "bold dark_orange",
    LogLevel.ERROR: "bold red",
}

#: Default Rich styles keyed by :class:`LogLevel` severity.


class RichConsoleAdapter(ConsolePort):
    """Render log entries using Rich formatting with style overrides."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: MutableMapping[LogLevel | str, str] | None = None,
    ) -> None:
        if console is not None:
            self._console = console
        else:
            self._console = Console(stderr=True, force_terminal=force_color or None, no_color=no_color)
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = LogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged

    def emit(self, entry: LogEntry, *, colorize: bool) -> None:
        """Print ``entry`` using Rich with optional colour.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> from io import StringIO
        >>> entry = LogEntry(datetime(2025, 9, 30, 12, 0, 5, tzinfo=timezone.utc), LogLevel.INFO, 'INDEX', 'PAGE_LOAD', 'index loaded')
        >>> console = Console(file=StringIO(), record=True)
        >>> RichConsoleAdapter(console=console).emit(entry, colorize=False)
        >>> console.export_text().strip()
        '[12:00:05] [INFO] [INDEX] [PAGE_LOAD] index loaded'
        """
        style = self._style_map.get(entry.level, "") if colorize and not self._no_color else ""
        line = self._format_line(entry)
        self._console.print(line, style=style, highlight=False, markup=False)
        if entry.level is LogLevel.ERROR and entry.stack_trace:
            self._console.print(entry.stack_trace, style=style, highlight=False, markup=False)

    @staticmethod
    def _format_line(entry: LogEntry) -> str:
        clock = entry.timestamp.strftime("%H:%M:%S")
        line = f"[{clock}] [{entry.level.name}] [{entry.source}] [{entry.tag}] {entry.message}"
        if entry.data:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(entry.data.items()))
        return line


__all__ = ["RichConsoleAdapter"]
