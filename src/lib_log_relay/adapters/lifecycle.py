"""Process lifecycle adapter implementing :class:`LifecycleSignalPort`.

Purpose
-------
Translate host events into the two notifications the relay understands:

* ``hidden`` - the host UI lost focus/visibility (hosts call
  :meth:`ProcessLifecycle.notify_hidden`).
* ``teardown`` - the process is about to end. :meth:`ProcessLifecycle.install`
  wires this to :mod:`atexit` and ``SIGTERM``.

Teardown callbacks run at most once and synchronously.
"""

from __future__ import annotations

import atexit
import logging
import signal
from collections.abc import Callable
from types import FrameType
from typing import Any

from lib_log_relay.application.ports.lifecycle import LifecycleSignalPort

LOGGER = logging.getLogger(__name__)


class ProcessLifecycle(LifecycleSignalPort):
    """Fan visibility and teardown notifications out to subscribers.

    Examples
    --------
    >>> lifecycle = ProcessLifecycle()
    >>> calls = []
    >>> lifecycle.on_teardown(lambda: calls.append("teardown"))
    >>> lifecycle.notify_teardown()
    >>> lifecycle.notify_teardown()
    >>> calls
    ['teardown']
    """

    def __init__(self) -> None:
        self._hidden_callbacks: list[Callable[[], None]] = []
        self._teardown_callbacks: list[Callable[[], None]] = []
        self._visible = True
        self._torn_down = False
        self._installed = False
        self._previous_sigterm: Any = None

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def on_hidden(self, callback: Callable[[], None]) -> None:
        self._hidden_callbacks.append(callback)

    def on_teardown(self, callback: Callable[[], None]) -> None:
        self._teardown_callbacks.append(callback)

    def notify_hidden(self) -> None:
        """Record the transition to hidden and notify subscribers once per transition."""

        if not self._visible:
            return
        self._visible = False
        self._run(self._hidden_callbacks, "hidden")

    def notify_visible(self) -> None:
        self._visible = True

    def notify_teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True
        self._run(self._teardown_callbacks, "teardown")

    def install(self) -> None:
        """Hook :mod:`atexit` and ``SIGTERM`` to :meth:`notify_teardown`."""

        if self._installed:
            return
        atexit.register(self.notify_teardown)
        try:
            self._previous_sigterm = signal.signal(signal.SIGTERM, self._handle_sigterm)
        except ValueError:
            # signal handlers can only be installed from the main thread
            LOGGER.debug("SIGTERM hook not installed outside the main thread")
            self._previous_sigterm = None
        self._installed = True

    def uninstall(self) -> None:
        if not self._installed:
            return
        atexit.unregister(self.notify_teardown)
        if self._previous_sigterm is not None:
            try:
                signal.signal(signal.SIGTERM, self._previous_sigterm)
            except ValueError:
                LOGGER.debug("SIGTERM hook not restored outside the main thread")
        self._previous_sigterm = None
        self._installed = False

    def _handle_sigterm(self, signum: int, frame: FrameType | None) -> None:
        self.notify_teardown()
        previous = self._previous_sigterm
        if callable(previous):
            previous(signum, frame)
            return
        if previous == signal.SIG_IGN:
            return
        raise SystemExit(128 + signum)

    @staticmethod
    def _run(callbacks: list[Callable[[], None]], name: str) -> None:
        for callback in list(callbacks):
            try:
                callback()
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Lifecycle %s callback raised; continuing", name, exc_info=exc)


__all__ = ["ProcessLifecycle"]
