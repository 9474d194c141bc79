"""CLI behaviour coverage for the click command group."""

from __future__ import annotations

import json
import sys
from typing import Callable

import httpx
import lib_cli_exit_tools
import pytest
from click.testing import CliRunner

from lib_log_relay import __init__conf__
from lib_log_relay import cli as cli_mod
from lib_log_relay.adapters.transport import HttpxTransport
from lib_log_relay.runtime import summary_info


def run_cli(args: list[str] | None = None) -> tuple[int, str, BaseException | None]:
    """Invoke the command group with ``CliRunner`` and capture output."""

    runner = CliRunner()
    original_argv = sys.argv
    sys.argv = [__init__conf__.shell_command]
    try:
        result = runner.invoke(cli_mod.cli, args or [], prog_name=__init__conf__.shell_command)
    finally:
        sys.argv = original_argv
    return result.exit_code, result.output, result.exception


def test_cli_without_subcommand_prints_summary() -> None:
    exit_code, stdout, _ = run_cli()

    assert exit_code == 0
    assert stdout == summary_info()


def test_cli_info_command_matches_summary() -> None:
    exit_code, stdout, _ = run_cli(["info"])

    assert exit_code == 0
    assert stdout == summary_info()
    assert "Info for lib_log_relay:" in stdout


def test_cli_version_flag() -> None:
    exit_code, stdout, _ = run_cli(["--version"])

    assert exit_code == 0
    assert stdout.strip() == __init__conf__.version


def test_cli_no_traceback_option(monkeypatch: pytest.MonkeyPatch) -> None:
    """`--no-traceback` should disable verbose tracebacks for subsequent commands."""

    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", True, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", True, raising=False)

    exit_code, _stdout, _exception = run_cli(["--no-traceback", "info"])

    assert exit_code == 0
    assert lib_cli_exit_tools.config.traceback is False
    assert lib_cli_exit_tools.config.traceback_force_color is False


def test_cli_export_json_lists_demo_entries() -> None:
    exit_code, stdout, _ = run_cli(["export", "--format", "json", "--count", "4"])

    assert exit_code == 0
    decoded = json.loads(stdout)
    assert [item["level"] for item in decoded] == ["DEBUG", "INFO", "WARN", "ERROR"]
    assert {item["tag"] for item in decoded} == {"DEMO"}


def test_cli_export_text_respects_level_filter() -> None:
    exit_code, stdout, _ = run_cli(["export", "--count", "4", "--level", "warn"])

    assert exit_code == 0
    lines = stdout.strip().splitlines()
    assert len(lines) == 2
    assert "[WARN] [INDEX] [DEMO] demo entry 3" in lines[0]


def _patch_transport(monkeypatch: pytest.MonkeyPatch, handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    original_init = HttpxTransport.__init__

    def patched_init(self: HttpxTransport, endpoint: str, **kwargs: object) -> None:
        kwargs["client"] = httpx.AsyncClient(transport=httpx.MockTransport(recording))
        kwargs["beacon_client"] = httpx.Client(transport=httpx.MockTransport(recording))
        original_init(self, endpoint, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(HttpxTransport, "__init__", patched_init)
    return seen


def test_cli_send_test_delivers_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = _patch_transport(monkeypatch, lambda request: httpx.Response(202))

    exit_code, stdout, _ = run_cli(["send-test", "--endpoint", "http://collector.test/logs", "--count", "2"])

    assert exit_code == 0
    assert "admitted=2 delivered=2" in stdout
    assert str(seen[0].url) == "http://collector.test/logs"
    assert len(json.loads(seen[0].content)["logs"]) == 2


def test_cli_send_test_reports_failure_with_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(500))

    exit_code, stdout, _ = run_cli(["send-test", "--count", "1"])

    assert exit_code == 1
    assert "delivered=0 failed_attempts=2 beaconed=1" in stdout


def test_main_restores_traceback_preferences(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", True, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", True, raising=False)

    recorded: dict[str, bool] = {}

    def fake_run_cli(command: Callable[..., int], argv: list[str] | None = None, *, prog_name: str | None = None, **_: object) -> int:
        runner = CliRunner()
        result = runner.invoke(command, ["info"] if argv is None else argv)
        if result.exception is not None:
            raise result.exception
        recorded["traceback"] = lib_cli_exit_tools.config.traceback
        recorded["traceback_force_color"] = lib_cli_exit_tools.config.traceback_force_color
        return result.exit_code

    monkeypatch.setattr(lib_cli_exit_tools, "run_cli", fake_run_cli)

    exit_code = cli_mod.main(["--no-traceback", "info"])

    assert exit_code == 0
    assert recorded == {"traceback": False, "traceback_force_color": False}
    assert lib_cli_exit_tools.config.traceback is True
    assert lib_cli_exit_tools.config.traceback_force_color is True


def test_main_consumes_sys_argv(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", False, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", False, raising=False)
    monkeypatch.setattr(sys, "argv", [__init__conf__.shell_command, "info"], raising=False)

    exit_code = cli_mod.main()
    captured = capsys.readouterr()

    assert exit_code == 0
    assert "Info for lib_log_relay" in captured.out
