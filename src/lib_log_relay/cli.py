"""Click command group exposing the relay to operators.

Purpose
-------
Offer a small operational surface: print package metadata, push test
entries at a collector, and preview ring-buffer exports.

Contents
--------
* :func:`cli` - command group with ``--use-dotenv`` and ``--traceback``.
* :func:`cli_info`, :func:`cli_send_test`, :func:`cli_export` - subcommands.
* :func:`main` - console-script entry point wrapping ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import asyncio
import dataclasses
import os
from typing import Any, Sequence

import click
import lib_cli_exit_tools

from . import __init__conf__
from . import config as config_module
from .domain import DumpFormat, LogLevel
from .runtime import create_pipeline, summary_info

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_LEVEL_CHOICE = click.Choice([level.name for level in LogLevel], case_sensitive=False)
_FORMAT_CHOICE = click.Choice([fmt.value for fmt in DumpFormat], case_sensitive=False)


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(version)s")
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load LOG_RELAY_* variables from the nearest .env (also enabled by {config_module.DOTENV_ENV_VAR}=1).",
)
@click.option(
    "--traceback/--no-traceback",
    default=None,
    help="Show full Python tracebacks on errors.",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool, traceback: bool | None) -> None:
    """Telemetry relay utilities."""

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    if config_module.should_use_dotenv(explicit=explicit, env_value=os.getenv(config_module.DOTENV_ENV_VAR)):
        config_module.enable_dotenv()

    if traceback is not None:
        lib_cli_exit_tools.config.traceback = traceback
        lib_cli_exit_tools.config.traceback_force_color = traceback

    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("send-test", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--endpoint", default=None, help="Collector URL (defaults to LOG_RELAY_ENDPOINT or the built-in default).")
@click.option("--count", default=3, show_default=True, type=click.IntRange(min=1), help="Number of entries to send.")
@click.option("--level", default="INFO", show_default=True, type=_LEVEL_CHOICE, help="Level of the test entries.")
def cli_send_test(endpoint: str | None, count: int, level: str) -> None:
    """Log COUNT test entries, flush them once, then shut down."""

    settings = config_module.build_settings()
    if endpoint is not None:
        settings = dataclasses.replace(settings, endpoint=endpoint)
    outcome = asyncio.run(_send_test(settings, count=count, level=LogLevel.from_name(level)))
    click.echo(
        f"endpoint={settings.endpoint} admitted={outcome['admitted']} "
        f"delivered={outcome['delivered']} failed_attempts={outcome['failed']} beaconed={outcome['beaconed']}",
    )
    if outcome["delivered"] < outcome["admitted"]:
        raise SystemExit(1)


async def _send_test(settings: config_module.RelaySettings, *, count: int, level: LogLevel) -> dict[str, int]:
    counters = {"admitted": 0, "delivered": 0, "failed": 0, "beaconed": 0}

    def record(name: str, payload: dict[str, Any]) -> None:
        if name == "entry_admitted":
            counters["admitted"] += 1
        elif name == "flush_succeeded":
            counters["delivered"] += payload["records"]
        elif name == "flush_failed":
            counters["failed"] += 1
        elif name == "beacon_sent":
            counters["beaconed"] += payload["records"]

    pipeline = create_pipeline(settings, diagnostic_hook=record)
    for index in range(1, count + 1):
        pipeline.log(level, "SEND_TEST", f"test entry {index}/{count}", {"index": index})
    await pipeline.flush()
    await pipeline.shutdown_async()
    return counters


@cli.command("export", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--format", "fmt", default="text", show_default=True, type=_FORMAT_CHOICE, help="Export format.")
@click.option("--count", default=5, show_default=True, type=click.IntRange(min=1), help="Number of demo entries.")
@click.option("--level", default=None, type=_LEVEL_CHOICE, help="Only export entries at or above this level.")
def cli_export(fmt: str, count: int, level: str | None) -> None:
    """Log COUNT demo entries locally and print the ring-buffer export."""

    settings = dataclasses.replace(config_module.build_settings(), console_enabled=False)
    pipeline = create_pipeline(settings)
    levels = list(LogLevel)
    for index in range(count):
        pipeline.log(levels[index % len(levels)], "DEMO", f"demo entry {index + 1}", {"index": index + 1})
    # no loop runs and no teardown hook is installed, so nothing is delivered
    click.echo(pipeline.export_logs(fmt, level=level))


def main(argv: Sequence[str] | None = None) -> int:
    """Run :func:`cli` through ``lib_cli_exit_tools`` and restore traceback preferences."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        lib_cli_exit_tools.config.traceback = previous_traceback
        lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
