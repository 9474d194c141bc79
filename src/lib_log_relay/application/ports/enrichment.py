"""Port for the read-only identity/device source queried at log time."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EnrichmentPort(Protocol):
    """Synchronous accessors for the current user, device, and view.

    Implementations return ``None`` (or the role/device sentinels) when a
    value is absent; the pipeline additionally guards against accessors that
    raise.
    """

    def current_user_id(self) -> str | None: ...

    def current_display_name(self) -> str | None: ...

    def current_role(self) -> str: ...

    def device_descriptor(self) -> str: ...

    def current_view(self) -> str | None:
        """Return the navigation path of the active view."""


__all__ = ["EnrichmentPort"]
