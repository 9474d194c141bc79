"""Identity and device enrichment values plus their fallible parsers.

Purpose
-------
Describe the user/device context attached to delivery records and provide
pure helpers that turn raw session-store strings into those values. Every
helper degrades to a sentinel instead of raising: malformed stored identity
data must never reach the caller of ``log()``.

Contents
--------
* :class:`EnrichmentSnapshot` - values resolved at admission time.
* :func:`parse_stored_json` - fallible JSON parse returning ``None``.
* :func:`display_name_from`, :func:`role_from`, :func:`describe_user_agent`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

UNKNOWN_ROLE = "UNKNOWN"
UNKNOWN_DEVICE = "Unknown (Unknown)"


@dataclass(slots=True, frozen=True)
class EnrichmentSnapshot:
    """User/device context captured when an entry is admitted for delivery."""

    user_id: str | None = None
    user_display_name: str | None = None
    user_role: str = UNKNOWN_ROLE
    device_descriptor: str = UNKNOWN_DEVICE


def parse_stored_json(raw: str | None) -> Mapping[str, Any] | None:
    """Parse a stored JSON object, returning ``None`` when absent or malformed.

    Examples
    --------
    >>> parse_stored_json('{"name": "Dana"}')["name"]
    'Dana'
    >>> parse_stored_json("{not json") is None
    True
    >>> parse_stored_json("[1, 2]") is None
    True
    """

    if not raw:
        return None
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return value if isinstance(value, Mapping) else None


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def display_name_from(primary: Mapping[str, Any] | None, fallback: Mapping[str, Any] | None) -> str | None:
    """Pick the user's display name from the presenter record, then the user record.

    Examples
    --------
    >>> display_name_from({"presenter": {"name": "Dr. Levi"}}, None)
    'Dr. Levi'
    >>> display_name_from(None, {"firstName": "Noa", "lastName": "Katz"})
    'Noa Katz'
    """

    if primary is not None:
        presenter = primary.get("presenter")
        if isinstance(presenter, Mapping) and _text(presenter.get("name")):
            return presenter["name"]
        if _text(primary.get("name")):
            return primary["name"]
    if fallback is not None:
        for key in ("name", "fullName"):
            if _text(fallback.get(key)):
                return fallback[key]
        first, last = _text(fallback.get("firstName")), _text(fallback.get("lastName"))
        if first and last:
            return f"{first} {last}"
    return None


def role_from(user: Mapping[str, Any] | None) -> str:
    """Map presenter/participant flags onto the collector's role names.

    Examples
    --------
    >>> role_from({"isPresenter": True, "isParticipant": True})
    'BOTH'
    >>> role_from(None)
    'UNKNOWN'
    """

    if user is None:
        return UNKNOWN_ROLE
    presenter = bool(user.get("isPresenter"))
    participant = bool(user.get("isParticipant"))
    if presenter and participant:
        return "BOTH"
    if presenter:
        return "PRESENTER"
    if participant:
        return "PARTICIPANT"
    return UNKNOWN_ROLE


_BROWSERS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("Chrome", ("Chrome",), ("Edg",)),
    ("Safari", ("Safari",), ("Chrome",)),
    ("Firefox", ("Firefox",), ()),
    ("Edge", ("Edg",), ()),
)

_SYSTEMS: tuple[tuple[str, str], ...] = (
    ("iPhone", "iPhone"),
    ("iPad", "iPad"),
    ("Android", "Android"),
    ("Windows", "Windows"),
    ("Mac", "macOS"),
    ("Linux", "Linux"),
)


def describe_user_agent(user_agent: str | None) -> str:
    """Return ``"<Browser> (<OS>)"`` for a user-agent string.

    Examples
    --------
    >>> describe_user_agent("Mozilla/5.0 (Windows NT 10.0) AppleWebKit Chrome/120.0 Safari/537.36")
    'Chrome (Windows)'
    >>> describe_user_agent("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0) Version/17.0 Mobile Safari/604.1")
    'Safari (iPhone)'
    >>> describe_user_agent(None)
    'Unknown (Unknown)'
    """

    ua = user_agent or ""
    browser = "Unknown"
    for name, required, excluded in _BROWSERS:
        if all(token in ua for token in required) and not any(token in ua for token in excluded):
            browser = name
            break
    system = "Unknown"
    for token, name in _SYSTEMS:
        if token in ua:
            system = name
            break
    return f"{browser} ({system})"


__all__ = [
    "EnrichmentSnapshot",
    "UNKNOWN_DEVICE",
    "UNKNOWN_ROLE",
    "describe_user_agent",
    "display_name_from",
    "parse_stored_json",
    "role_from",
]
