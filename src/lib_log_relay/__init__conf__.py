"""Static package metadata surfaced by the CLI banner.

Kept free of runtime imports so the CLI can print metadata before any
pipeline is composed.
"""

from __future__ import annotations

import sys
from typing import Callable

name = "lib_log_relay"
title = "Client-side telemetry buffering and delivery relay"
version = "0.1.0"
author = "bitranox"
shell_command = "lib_log_relay"


def print_info(writer: Callable[[str], object] | None = None) -> None:
    """Write the metadata banner line by line through ``writer``.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_relay:\\n'
    """

    emit = writer if writer is not None else sys.stdout.write
    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    )
    width = max(len(label) for label, _ in fields)
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label:<{width}} = {value}\n")


__all__ = ["name", "print_info", "shell_command", "title", "version"]
