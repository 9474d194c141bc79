"""Configuration resolution for the telemetry relay.

Purpose
-------
Turn keyword arguments plus ``LOG_RELAY_*`` environment overrides into an
immutable :class:`RelaySettings` value, and offer opt-in ``.env`` loading via
python-dotenv for CLI and host entry points.

Contents
--------
* :class:`RelaySettings` - frozen settings consumed by the composition root.
* :func:`build_settings` - keyword + environment resolution with validation.
* :data:`DOTENV_ENV_VAR`, :func:`should_use_dotenv`, :func:`enable_dotenv`.

System Role
-----------
Configuration is the only place where misconfiguration surfaces as an error
(:class:`ValueError` naming the offending variable); everything downstream
assumes validated values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

from dotenv import find_dotenv, load_dotenv

from lib_log_relay.domain.levels import LogLevel

LOGGER = logging.getLogger(__name__)

DOTENV_ENV_VAR = "LOG_RELAY_USE_DOTENV"

DEFAULT_ENDPOINT = "http://localhost:8080/api/v1/logs"
DEFAULT_CLIENT_VERSION = "web-1.0.0"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

T = TypeVar("T")

_dotenv_loaded: Path | None = None


@dataclass(slots=True, frozen=True)
class RelaySettings:
    """Validated configuration for one :class:`TelemetryPipeline`.

    Attributes
    ----------
    endpoint:
        Collector URL receiving ``POST {"logs": [...]}`` batches.
    flush_interval:
        Seconds between periodic flushes while records are queued.
    max_local, max_queue:
        Capacities of the local ring buffer and the delivery queue.
    server_level, console_level:
        Minimum severities admitted for delivery and echoed to the console.
    console_enabled:
        ``False`` disables the Rich console echo.
    client_version:
        ``appVersion`` reported with every record.
    request_timeout, beacon_timeout:
        Seconds allowed for interactive sends and teardown beacons.
    """

    endpoint: str = DEFAULT_ENDPOINT
    flush_interval: float = 30.0
    max_local: int = 500
    max_queue: int = 100
    server_level: LogLevel = LogLevel.INFO
    console_level: LogLevel = LogLevel.DEBUG
    console_enabled: bool = True
    client_version: str = DEFAULT_CLIENT_VERSION
    request_timeout: float = 10.0
    beacon_timeout: float = 2.0


def build_settings(
    *,
    endpoint: str = DEFAULT_ENDPOINT,
    flush_interval: float = 30.0,
    max_local: int = 500,
    max_queue: int = 100,
    server_level: str | LogLevel = LogLevel.INFO,
    console_level: str | LogLevel = LogLevel.DEBUG,
    console_enabled: bool = True,
    client_version: str = DEFAULT_CLIENT_VERSION,
    request_timeout: float = 10.0,
    beacon_timeout: float = 2.0,
) -> RelaySettings:
    """Resolve keyword arguments and ``LOG_RELAY_*`` overrides into settings.

    Environment variables win over keyword arguments so operators can retune
    a deployed client without code changes.

    Raises
    ------
    ValueError
        When a value (from either source) cannot be parsed or is not positive.

    Examples
    --------
    >>> import os
    >>> os.environ["LOG_RELAY_MAX_QUEUE"] = "25"
    >>> build_settings(max_queue=100).max_queue
    25
    >>> os.environ["LOG_RELAY_MAX_QUEUE"] = "many"
    >>> build_settings()
    Traceback (most recent call last):
    ...
    ValueError: LOG_RELAY_MAX_QUEUE must be an integer, got 'many'
    >>> del os.environ["LOG_RELAY_MAX_QUEUE"]
    """

    settings = RelaySettings(
        endpoint=_env("LOG_RELAY_ENDPOINT", endpoint, _parse_endpoint),
        flush_interval=_env("LOG_RELAY_FLUSH_INTERVAL", flush_interval, _parse_float),
        max_local=_env("LOG_RELAY_MAX_LOCAL", max_local, _parse_int),
        max_queue=_env("LOG_RELAY_MAX_QUEUE", max_queue, _parse_int),
        server_level=_env("LOG_RELAY_SERVER_LEVEL", server_level, _parse_level),
        console_level=_env("LOG_RELAY_CONSOLE_LEVEL", console_level, _parse_level),
        console_enabled=_env("LOG_RELAY_CONSOLE", console_enabled, _parse_bool),
        client_version=_env("LOG_RELAY_APP_VERSION", client_version, str),
        request_timeout=_env("LOG_RELAY_TIMEOUT", request_timeout, _parse_float),
        beacon_timeout=_env("LOG_RELAY_BEACON_TIMEOUT", beacon_timeout, _parse_float),
    )
    _require_positive(
        LOG_RELAY_FLUSH_INTERVAL=settings.flush_interval,
        LOG_RELAY_MAX_LOCAL=settings.max_local,
        LOG_RELAY_MAX_QUEUE=settings.max_queue,
        LOG_RELAY_TIMEOUT=settings.request_timeout,
        LOG_RELAY_BEACON_TIMEOUT=settings.beacon_timeout,
    )
    return settings


def _env(name: str, default: Any, parse: Callable[[Any], T]) -> T:
    raw = os.getenv(name)
    value: Any = default if raw is None or not raw.strip() else raw.strip()
    try:
        return parse(value)
    except ValueError as exc:
        raise ValueError(f"{name} {exc}") from exc


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"must be an integer, got {value!r}") from None


def _parse_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"must be a number, got {value!r}") from None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"must be a boolean flag, got {value!r}")


def _parse_level(value: Any) -> LogLevel:
    try:
        return LogLevel.coerce(value)
    except ValueError:
        names = ", ".join(level.name for level in LogLevel)
        raise ValueError(f"must be one of {names}, got {value!r}") from None


def _parse_endpoint(value: Any) -> str:
    endpoint = str(value).strip()
    if not endpoint.startswith(("http://", "https://")):
        raise ValueError(f"must be an http(s) URL, got {value!r}")
    return endpoint


def _require_positive(**values: float) -> None:
    for name, value in values.items():
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value!r}")


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` loading is requested.

    An explicit CLI flag wins; otherwise :data:`DOTENV_ENV_VAR` is consulted.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` without overriding existing variables.

    Returns the loaded file, or ``None`` when no ``.env`` was found. Repeated
    calls are no-ops once a file has been loaded.
    """

    global _dotenv_loaded
    if _dotenv_loaded is not None:
        return _dotenv_loaded
    if search_from is not None:
        candidate = _find_upwards(search_from)
    else:
        found = find_dotenv(usecwd=True)
        candidate = Path(found) if found else None
    if candidate is None:
        LOGGER.debug("No .env file found")
        return None
    load_dotenv(candidate, override=False)
    _dotenv_loaded = candidate.resolve()
    LOGGER.debug("Loaded environment from %s", _dotenv_loaded)
    return _dotenv_loaded


def _find_upwards(start: Path) -> Path | None:
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _dotenv_loaded
    _dotenv_loaded = None


__all__ = [
    "DOTENV_ENV_VAR",
    "RelaySettings",
    "build_settings",
    "enable_dotenv",
    "should_use_dotenv",
]
