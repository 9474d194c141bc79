"""Diagnostic hook plumbing shared by the use cases."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

LOGGER = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None
Emit = Callable[[str, dict[str, Any]], None]


def build_diagnostic_emitter(hook: DiagnosticHook) -> Emit:
    """Wrap ``hook`` so that a failing callback never breaks the pipeline.

    Examples
    --------
    >>> seen = []
    >>> emit = build_diagnostic_emitter(lambda name, payload: seen.append(name))
    >>> emit("flush_started", {"records": 1})
    >>> seen
    ['flush_started']
    >>> build_diagnostic_emitter(None)("ignored", {})
    """

    if hook is None:

        def _noop(name: str, payload: dict[str, Any]) -> None:
            return None

        return _noop

    def _emit(name: str, payload: dict[str, Any]) -> None:
        try:
            hook(name, payload)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Diagnostic hook raised while reporting %s", name, exc_info=exc)

    return _emit


__all__ = ["DiagnosticHook", "Emit", "build_diagnostic_emitter"]
