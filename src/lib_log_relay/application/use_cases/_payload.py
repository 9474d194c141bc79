"""Sanitising of caller-supplied payloads before they become entry data."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ._diagnostics import Emit


def sanitize_payload(data: Any, emit: Emit) -> dict[str, Any] | None:
    """Return a JSON-safe shallow copy of ``data``.

    Exceptions are reduced to their message, non-mapping values are wrapped
    under ``"value"``, and any field that cannot be serialised is dropped on
    its own while the rest of the payload is kept.

    Examples
    --------
    >>> sanitize_payload({"status": 500, "handle": object()}, lambda name, payload: None)
    {'status': 500}
    >>> sanitize_payload(ValueError("bad input"), lambda name, payload: None)
    {'message': 'bad input'}
    >>> sanitize_payload(None, lambda name, payload: None) is None
    True
    """

    if data is None:
        return None
    if isinstance(data, BaseException):
        data = {"message": _safe_str(data)}
    elif not isinstance(data, Mapping):
        data = {"value": data}

    clean: dict[str, Any] = {}
    for key, value in data.items():
        try:
            json.dumps(value)
        except (TypeError, ValueError, OverflowError, RecursionError):
            emit("payload_field_dropped", {"field": str(key)})
            continue
        clean[str(key)] = value
    return clean


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:  # noqa: BLE001
        return type(value).__name__


__all__ = ["sanitize_payload"]
