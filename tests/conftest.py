from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta, timezone
from io import StringIO
from typing import Any

import pytest
from rich.console import Console

from lib_log_relay.domain.records import DeliveryRecord


class FakeHandle:
    def __init__(self, timer: "FakeTimer", interval: float, callback: Callable[[], None]) -> None:
        self.timer = timer
        self.interval = interval
        self.callback = callback
        self.cancelled = False
        self.expired = False

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.expired

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimer:
    """Deterministic timer: ticks and background sends run only when a test asks."""

    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.handles: list[FakeHandle] = []
        self.pending: list[Callable[[], Awaitable[Any]]] = []
        self.tasks: list[asyncio.Task[Any]] = []

    @property
    def active(self) -> list[FakeHandle]:
        return [handle for handle in self.handles if handle.active]

    def start_interval(self, interval: float, callback: Callable[[], None]) -> FakeHandle | None:
        if not self.available:
            return None
        handle = FakeHandle(self, interval, callback)
        self.handles.append(handle)
        return handle

    def run_soon(self, factory: Callable[[], Awaitable[Any]]) -> bool:
        if not self.available:
            return False
        self.pending.append(factory)
        return True

    def tick(self) -> None:
        for handle in self.active:
            handle.callback()

    def start_pending(self) -> list[asyncio.Task[Any]]:
        """Start queued background sends as tasks on the running loop."""

        started = [asyncio.ensure_future(factory()) for factory in self.pending]
        self.pending.clear()
        self.tasks.extend(started)
        return started

    async def run_pending(self) -> None:
        while self.pending:
            await asyncio.gather(*self.start_pending())

    async def wait_idle(self) -> None:
        await self.run_pending()
        if self.tasks:
            await asyncio.gather(*self.tasks)
            self.tasks.clear()


class FakeTransport:
    """Transport whose responses are scripted and whose sends can be held open."""

    def __init__(self, *, results: Sequence[bool | BaseException] = (), gated: bool = False) -> None:
        self.results = list(results)
        self.gated = gated
        self.gate = asyncio.Event() if gated else None
        self.sent: list[list[DeliveryRecord]] = []
        self.beacons: list[list[DeliveryRecord]] = []
        self.closed = False
        self.started = 0

    def release(self) -> None:
        assert self.gate is not None
        self.gate.set()

    async def send(self, records: Sequence[DeliveryRecord]) -> bool:
        self.started += 1
        self.sent.append(list(records))
        if self.gate is not None:
            await self.gate.wait()
        outcome: bool | BaseException = self.results.pop(0) if self.results else True
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def beacon(self, records: Sequence[DeliveryRecord]) -> None:
        self.beacons.append(list(records))

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        value = self.current
        self.current = value + timedelta(milliseconds=1)
        return value


class StaticEnrichment:
    def __init__(
        self,
        *,
        user_id: str | None = "noak",
        display_name: str | None = "Noa Katz",
        role: str = "PARTICIPANT",
        device: str = "Chrome (Linux)",
        view: str | None = "/attendance.html",
    ) -> None:
        self.user_id = user_id
        self.display_name = display_name
        self.role = role
        self.device = device
        self.view = view

    def current_user_id(self) -> str | None:
        return self.user_id

    def current_display_name(self) -> str | None:
        return self.display_name

    def current_role(self) -> str:
        return self.role

    def device_descriptor(self) -> str:
        return self.device

    def current_view(self) -> str | None:
        return self.view


class DiagnosticRecorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, name: str, payload: dict[str, Any]) -> None:
        self.events.append((name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def make_enrichment() -> type[StaticEnrichment]:
    return StaticEnrichment


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def enrichment() -> StaticEnrichment:
    return StaticEnrichment()


@pytest.fixture
def diagnostics() -> DiagnosticRecorder:
    return DiagnosticRecorder()


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=200, force_terminal=True, color_system="truecolor")


@pytest.fixture(autouse=True)
def _isolate_relay_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("LOG_RELAY_"):
            monkeypatch.delenv(name, raising=False)
