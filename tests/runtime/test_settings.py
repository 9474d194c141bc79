from __future__ import annotations

import pytest

from lib_log_relay import LogLevel, RelaySettings, build_settings, create_pipeline


def test_defaults_match_documented_values() -> None:
    settings = build_settings()

    assert settings == RelaySettings()
    assert settings.max_local == 500
    assert settings.max_queue == 100
    assert settings.flush_interval == 30.0
    assert settings.server_level is LogLevel.INFO
    assert settings.client_version == "web-1.0.0"


def test_environment_overrides_keyword_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_RELAY_ENDPOINT", "https://collector.example/api/v1/logs")
    monkeypatch.setenv("LOG_RELAY_FLUSH_INTERVAL", "5")
    monkeypatch.setenv("LOG_RELAY_SERVER_LEVEL", "warning")
    monkeypatch.setenv("LOG_RELAY_CONSOLE", "off")

    settings = build_settings(endpoint="http://ignored.test/logs", flush_interval=60.0, console_enabled=True)

    assert settings.endpoint == "https://collector.example/api/v1/logs"
    assert settings.flush_interval == 5.0
    assert settings.server_level is LogLevel.WARN
    assert settings.console_enabled is False


def test_blank_environment_values_fall_back_to_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_RELAY_MAX_LOCAL", "  ")

    assert build_settings(max_local=42).max_local == 42


@pytest.mark.parametrize(
    "variable, value, message",
    [
        ("LOG_RELAY_MAX_QUEUE", "many", "LOG_RELAY_MAX_QUEUE must be an integer"),
        ("LOG_RELAY_MAX_LOCAL", "0", "LOG_RELAY_MAX_LOCAL must be positive"),
        ("LOG_RELAY_FLUSH_INTERVAL", "soon", "LOG_RELAY_FLUSH_INTERVAL must be a number"),
        ("LOG_RELAY_SERVER_LEVEL", "verbose", "LOG_RELAY_SERVER_LEVEL must be one of"),
        ("LOG_RELAY_CONSOLE", "maybe", "LOG_RELAY_CONSOLE must be a boolean flag"),
        ("LOG_RELAY_ENDPOINT", "ftp://collector", "LOG_RELAY_ENDPOINT must be an http"),
    ],
)
def test_invalid_values_name_the_variable(monkeypatch: pytest.MonkeyPatch, variable: str, value: str, message: str) -> None:
    monkeypatch.setenv(variable, value)

    with pytest.raises(ValueError, match=message):
        build_settings()


def test_invalid_keyword_is_rejected_too() -> None:
    with pytest.raises(ValueError, match="LOG_RELAY_MAX_QUEUE must be positive"):
        build_settings(max_queue=0)


def test_create_pipeline_rejects_overrides_with_explicit_settings() -> None:
    with pytest.raises(ValueError, match="Unexpected overrides"):
        create_pipeline(RelaySettings(), max_queue=10)


def test_create_pipeline_outside_a_loop_keeps_entries_queued() -> None:
    pipeline = create_pipeline(console_enabled=False)

    pipeline.error("BOOT", "failed before loop start")

    assert pipeline.queue_size() == 1
    assert pipeline.scheduler_state().name == "IDLE"
