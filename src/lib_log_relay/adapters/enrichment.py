"""Session-store enrichment adapter implementing :class:`EnrichmentPort`.

Purpose
-------
Read the identity the host's login flow keeps in a key/value session store
(``bgu_username``, ``semscan_user_data``, ``user_data``) and the device the
client runs on. The store is only ever read.
"""

from __future__ import annotations

import platform
from collections.abc import Callable, Mapping

from lib_log_relay.application.ports.enrichment import EnrichmentPort
from lib_log_relay.domain.enrichment import describe_user_agent, display_name_from, parse_stored_json, role_from

USERNAME_KEY = "bgu_username"
PRESENTER_DATA_KEY = "semscan_user_data"
USER_DATA_KEY = "user_data"


def default_user_agent() -> str:
    """Return a user-agent style string describing the local interpreter."""

    return f"Python/{platform.python_version()} ({platform.system()}; {platform.platform()})"


class SessionStoreEnrichment(EnrichmentPort):
    """Resolve enrichment values from a live session store mapping.

    Parameters
    ----------
    store:
        Mapping of stored strings; read on every call so identity changes
        (e.g. a completed login) are visible immediately.
    user_agent:
        Client user-agent string; defaults to :func:`default_user_agent`.
    location:
        Callable returning the current navigation path.

    Examples
    --------
    >>> store = {"bgu_username": "noak", "user_data": '{"name": "Noa", "isPresenter": true}'}
    >>> source = SessionStoreEnrichment(store, user_agent="Firefox/128.0 (X11; Linux x86_64)")
    >>> source.current_user_id(), source.current_display_name(), source.current_role()
    ('noak', 'Noa', 'PRESENTER')
    >>> source.device_descriptor()
    'Firefox (Linux)'
    >>> store["user_data"] = "{corrupted"
    >>> source.current_role()
    'UNKNOWN'
    """

    def __init__(
        self,
        store: Mapping[str, str | None] | None = None,
        *,
        user_agent: str | None = None,
        location: Callable[[], str | None] | None = None,
    ) -> None:
        self._store: Mapping[str, str | None] = store if store is not None else {}
        self._user_agent = user_agent if user_agent is not None else default_user_agent()
        self._location = location

    def _read(self, key: str) -> str | None:
        value = self._store.get(key)
        return value if isinstance(value, str) else None

    def current_user_id(self) -> str | None:
        return self._read(USERNAME_KEY) or None

    def current_display_name(self) -> str | None:
        return display_name_from(
            parse_stored_json(self._read(PRESENTER_DATA_KEY)),
            parse_stored_json(self._read(USER_DATA_KEY)),
        )

    def current_role(self) -> str:
        return role_from(parse_stored_json(self._read(USER_DATA_KEY)))

    def device_descriptor(self) -> str:
        return describe_user_agent(self._user_agent)

    def current_view(self) -> str | None:
        if self._location is None:
            return ""
        return self._location()


__all__ = ["SessionStoreEnrichment", "default_user_agent"]
