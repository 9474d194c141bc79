"""Log level abstraction shared by buffering, admission, and presentation.

Purpose
-------
Offer a totally ordered severity type so the pipeline can gate delivery with a
plain comparison (``level >= server_level``) and render the wire/console names
the collector expects.

Contents
--------
* :class:`LogLevel` enum with ordering and conversion helpers.

System Role
-----------
Used by the entry model to tag events, by admission to decide delivery
candidacy, and by the console adapter to pick styles.
"""

from __future__ import annotations

from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels ordered ``DEBUG < INFO < WARN < ERROR``."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value >= other.value

    @property
    def wire_name(self) -> str:
        """Return the upper-case name sent to the collector (``"WARN"``)."""

        return self.name

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Resolve a case-insensitive level name; ``WARNING`` aliases ``WARN``.

        Examples
        --------
        >>> LogLevel.from_name(" info ") is LogLevel.INFO
        True
        >>> LogLevel.from_name("warning") is LogLevel.WARN
        True
        >>> LogLevel.from_name(None)
        Traceback (most recent call last):
        ...
        ValueError: Unknown log level: None
        """

        if not isinstance(name, str):
            raise ValueError(f"Unknown log level: {name!r}")
        normalized = name.strip().upper()
        if normalized == "WARNING":
            normalized = "WARN"
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def coerce(cls, level: "str | LogLevel") -> "LogLevel":
        """Normalise enum or string input into :class:`LogLevel`.

        Anything else, numbers and ``None`` included, raises :class:`ValueError`.
        """

        if isinstance(level, LogLevel):
            return level
        return cls.from_name(level)


__all__ = ["LogLevel"]
