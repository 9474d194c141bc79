"""Owned pipeline façade exposing the relay's public logging surface.

Purpose
-------
Bundle the composed collaborators (ring buffer, delivery queue, scheduler,
process callable) behind one object with an explicit lifecycle. Hosts keep a
reference to the :class:`TelemetryPipeline` they created; there is no
module-level runtime.

Contents
--------
* :class:`TelemetryPipeline` - level helpers, API/page/UI helpers,
  introspection, flush and shutdown paths.
* :class:`TagLogger` - proxy pinning a tag onto the level helpers.
* :func:`api_tag` - endpoint-to-area mapping used for API tags.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from lib_log_relay.application.use_cases._types import ProcessCallable, ProcessResult
from lib_log_relay.application.use_cases.flush import FlushScheduler, SchedulerState
from lib_log_relay.config import RelaySettings
from lib_log_relay.domain import DeliveryQueue, DumpFormat, LogEntry, LogLevel, RingBuffer

_API_AREAS: tuple[tuple[str, str], ...] = (
    ("/auth/login", "AUTH_LOGIN"),
    ("/register", "REGISTRATION"),
    ("/attendance", "ATTENDANCE"),
    ("/waiting-list", "WAITING_LIST"),
    ("/home", "PRESENTER_HOME"),
    ("/slots", "SLOTS"),
    ("/sessions", "SESSIONS"),
)


def api_tag(endpoint: str) -> str:
    """Return the functional area of ``endpoint`` (first match wins).

    Examples
    --------
    >>> api_tag("/api/v1/auth/login")
    'AUTH_LOGIN'
    >>> api_tag("/api/v1/presenters/7/home/slots")
    'PRESENTER_HOME'
    >>> api_tag("/api/v1/manual-attendance/pending")
    'ATTENDANCE'
    >>> api_tag("/api/v1/config")
    'API'
    """

    for fragment, area in _API_AREAS:
        if fragment in endpoint:
            return area
    return "API"


@dataclass(frozen=True)
class TagLogger:
    """Level helpers bound to a fixed tag.

    Examples
    --------
    >>> calls = []
    >>> class Pipeline:
    ...     def log(self, level, tag, message, data=None):
    ...         calls.append((level.name, tag, message))
    ...         return {"ok": True}
    >>> TagLogger(Pipeline(), "CHECKOUT").warn("slow response")
    {'ok': True}
    >>> calls
    [('WARN', 'CHECKOUT', 'slow response')]
    """

    pipeline: Any
    tag: str

    def log(self, level: str | LogLevel, message: str, data: Any = None) -> ProcessResult:
        return self.pipeline.log(level, self.tag, message, data)

    def debug(self, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.DEBUG, message, data)

    def info(self, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.INFO, message, data)

    def warn(self, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.WARN, message, data)

    warning = warn

    def error(self, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.ERROR, message, data)


class TelemetryPipeline:
    """Live relay instance created by :func:`lib_log_relay.create_pipeline`.

    Every logging method returns the process result dictionary
    (``{"ok": True, "admitted": bool}``) and never raises.
    """

    def __init__(
        self,
        *,
        settings: RelaySettings,
        process: ProcessCallable,
        ring_buffer: RingBuffer,
        queue: DeliveryQueue,
        scheduler: FlushScheduler,
        capture_dump: Callable[..., str],
        teardown: Callable[[], int],
        shutdown_async: Callable[[], Awaitable[None]],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._settings = settings
        self._process = process
        self._ring_buffer = ring_buffer
        self._queue = queue
        self._scheduler = scheduler
        self._capture_dump = capture_dump
        self._teardown = teardown
        self._shutdown_async = shutdown_async
        self._on_close = on_close

    @property
    def settings(self) -> RelaySettings:
        return self._settings

    # ------------------------------------------------------------------ logging

    def log(self, level: str | LogLevel, tag: str, message: str, data: Any = None) -> ProcessResult:
        try:
            resolved = LogLevel.coerce(level)
        except ValueError:
            return {"ok": False, "reason": "unknown_level"}
        return self._process(level=resolved, tag=tag, message=message, data=data)

    def debug(self, tag: str, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.DEBUG, tag, message, data)

    def info(self, tag: str, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.INFO, tag, message, data)

    def warn(self, tag: str, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.WARN, tag, message, data)

    warning = warn

    def error(self, tag: str, message: str, data: Any = None) -> ProcessResult:
        return self.log(LogLevel.ERROR, tag, message, data)

    def get(self, tag: str) -> TagLogger:
        """Return a :class:`TagLogger` pinned to ``tag``."""

        return TagLogger(self, tag)

    # ------------------------------------------------------------------ API helpers

    @staticmethod
    def api_tag(endpoint: str) -> str:
        return api_tag(endpoint)

    def api_request(self, method: str, endpoint: str, body: Any = None) -> ProcessResult:
        tag = f"{api_tag(endpoint)}_API_REQUEST"
        return self.info(tag, f"{method} {endpoint}", {"body": body} if body else None)

    def api_response(self, method: str, endpoint: str, status: int, data: Any = None) -> ProcessResult:
        tag = f"{api_tag(endpoint)}_API_RESPONSE"
        level = LogLevel.ERROR if status >= 400 else LogLevel.INFO
        return self.log(level, tag, f"{method} {endpoint} -> {status}", {"status": status, "data": data})

    def api_error(self, method: str, endpoint: str, error: BaseException | str) -> ProcessResult:
        """Record a failed request; exceptions contribute their traceback."""

        tag = f"{api_tag(endpoint)}_API_ERROR"
        payload: dict[str, Any] = {"message": str(error)}
        if isinstance(error, BaseException):
            payload["exception_type"] = type(error).__name__
            payload["stack"] = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return self.error(tag, f"{method} {endpoint} FAILED", payload)

    # ------------------------------------------------------------------ page / UI helpers

    def page_load(self, page_name: str) -> ProcessResult:
        return self.info("PAGE_LOAD", f"{page_name} loaded")

    def page_init(self, page_name: str) -> ProcessResult:
        return self.info("PAGE_INIT", f"{page_name} initializing...")

    def page_ready(self, page_name: str) -> ProcessResult:
        return self.info("PAGE_READY", f"{page_name} ready")

    def user_action(self, action: str, details: Any = None) -> ProcessResult:
        return self.info("USER_ACTION", action, details)

    def ui_state(self, component: str, state: str, details: Any = None) -> ProcessResult:
        return self.debug("UI_STATE", f"{component}: {state}", details)

    # ------------------------------------------------------------------ introspection

    def get_logs(self) -> list[LogEntry]:
        """Return the ring buffer contents, oldest first."""

        return self._ring_buffer.snapshot()

    def export_logs(
        self,
        fmt: str | DumpFormat = DumpFormat.TEXT,
        *,
        path: str | Path | None = None,
        level: str | LogLevel | None = None,
    ) -> str:
        """Render the ring buffer as text lines or a JSON array.

        Raises
        ------
        ValueError
            When ``fmt`` or ``level`` is not recognised.
        """

        dump_format = fmt if isinstance(fmt, DumpFormat) else DumpFormat.from_name(fmt)
        target = Path(path) if path is not None else None
        min_level = LogLevel.coerce(level) if level is not None else None
        return self._capture_dump(dump_format=dump_format, path=target, min_level=min_level)

    def clear_logs(self) -> None:
        self._ring_buffer.clear()
        self.info("LOGGER", "Logs cleared")

    def queue_size(self) -> int:
        return len(self._queue)

    def scheduler_state(self) -> SchedulerState:
        return self._scheduler.state

    @property
    def in_flight(self) -> int:
        """Number of records handed to the transport and not yet settled."""

        return len(self._scheduler.in_flight)

    @property
    def closed(self) -> bool:
        return self._scheduler.closed

    # ------------------------------------------------------------------ delivery & lifecycle

    async def flush(self) -> bool:
        """Await one interactive send of the queued records."""

        return await self._scheduler.flush("manual")

    def on_visibility_hidden(self) -> None:
        self._scheduler.on_visibility_hidden()

    def teardown(self) -> int:
        """Beacon the remaining queue and stop the timer; return records handed off."""

        return self._teardown()

    def shutdown(self) -> None:
        """Synchronous shutdown: teardown only.

        An interactive send still in flight is not awaited; use
        :meth:`shutdown_async` when a running loop is available.
        """

        self._teardown()
        self._close_hooks()

    async def shutdown_async(self) -> None:
        """Settle in-flight sends, flush once more, beacon the rest, close the transport."""

        await self._shutdown_async()
        self._close_hooks()

    def _close_hooks(self) -> None:
        on_close, self._on_close = self._on_close, None
        if on_close is not None:
            on_close()


__all__ = ["TagLogger", "TelemetryPipeline", "api_tag"]
