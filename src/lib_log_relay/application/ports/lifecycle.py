"""Port for host lifecycle notifications (visibility and teardown)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class LifecycleSignalPort(Protocol):
    """Deliver visibility-hidden and teardown notifications to subscribers.

    Teardown callbacks run synchronously; the host gives no guarantee that
    asynchronous work scheduled from them ever completes.
    """

    def on_hidden(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` for transitions to the hidden state."""

    def on_teardown(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` for imminent termination."""


__all__ = ["LifecycleSignalPort"]
