from __future__ import annotations

import asyncio
import logging

import pytest

from lib_log_relay.application.use_cases.flush import FlushScheduler, SchedulerState
from lib_log_relay.domain.delivery_queue import DeliveryQueue
from lib_log_relay.domain.levels import LogLevel
from lib_log_relay.domain.records import DeliveryRecord


def _record(name: str, level: LogLevel = LogLevel.INFO) -> DeliveryRecord:
    return DeliveryRecord(0, level, "T", name, None, None, "UNKNOWN", "Unknown (Unknown)", "web-1.0.0")


def _names(records: object) -> list[str]:
    return [record.message for record in records]  # type: ignore[attr-defined]


def _build(fake_timer, transport, diagnostics, *, max_records: int = 100) -> tuple[FlushScheduler, DeliveryQueue]:
    queue = DeliveryQueue(max_records=max_records)
    scheduler = FlushScheduler(queue=queue, transport=transport, timer=fake_timer, interval=30.0, emit=diagnostics)
    return scheduler, queue


def _admit(scheduler: FlushScheduler, queue: DeliveryQueue, record: DeliveryRecord) -> None:
    queue.append(record)
    scheduler.on_admitted(record)


def test_interval_must_be_positive(fake_timer, make_transport, diagnostics) -> None:
    with pytest.raises(ValueError, match="interval must be positive"):
        FlushScheduler(
            queue=DeliveryQueue(max_records=1),
            transport=make_transport(),
            timer=fake_timer,
            interval=0,
            emit=diagnostics,
        )


def test_first_admission_arms_timer_once(fake_timer, make_transport, diagnostics) -> None:
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)

    _admit(scheduler, queue, _record("a"))
    _admit(scheduler, queue, _record("b"))

    assert scheduler.state is SchedulerState.WAITING
    assert len(fake_timer.handles) == 1
    assert fake_timer.handles[0].interval == 30.0


def test_timer_that_stopped_running_is_replaced_on_next_admission(fake_timer, make_transport, diagnostics) -> None:
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)
    _admit(scheduler, queue, _record("a"))
    fake_timer.handles[0].expired = True

    _admit(scheduler, queue, _record("b"))

    assert len(fake_timer.handles) == 2
    assert fake_timer.active == [fake_timer.handles[1]]
    assert scheduler.state is SchedulerState.WAITING
    fake_timer.tick()
    assert _names(scheduler.in_flight) == ["a", "b"]


@pytest.mark.asyncio
async def test_cancelled_send_puts_snapshot_back(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport(gated=True)
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("a"))
    fake_timer.tick()
    (task,) = fake_timer.start_pending()
    await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert _names(queue) == ["a"]
    assert scheduler.in_flight == ()
    assert scheduler.state is SchedulerState.WAITING


@pytest.mark.asyncio
async def test_tick_sends_snapshot_and_goes_idle_on_success(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport()
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("a"))
    _admit(scheduler, queue, _record("b"))

    fake_timer.tick()

    assert scheduler.state is SchedulerState.FLUSHING
    assert _names(scheduler.in_flight) == ["a", "b"]
    assert len(queue) == 0

    await fake_timer.run_pending()

    assert _names(transport.sent[0]) == ["a", "b"]
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.in_flight == ()
    assert fake_timer.active == []
    assert ("flush_succeeded", {"records": 2}) in diagnostics.events


def test_error_admission_flushes_without_waiting_for_interval(fake_timer, make_transport, diagnostics) -> None:
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)
    assert scheduler.state is SchedulerState.IDLE

    _admit(scheduler, queue, _record("boom", LogLevel.ERROR))

    assert scheduler.state is SchedulerState.FLUSHING
    assert len(fake_timer.pending) == 1
    assert diagnostics.events[0] == ("flush_started", {"reason": "error", "records": 1})


def test_visibility_hidden_triggers_flush(fake_timer, make_transport, diagnostics) -> None:
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)
    _admit(scheduler, queue, _record("a"))

    scheduler.on_visibility_hidden()

    assert scheduler.state is SchedulerState.FLUSHING
    assert ("flush_started", {"reason": "hidden", "records": 1}) in diagnostics.events


@pytest.mark.asyncio
async def test_triggers_while_flushing_are_coalesced(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport(gated=True)
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("a"))
    assert scheduler.trigger("timer") is True
    tasks = fake_timer.start_pending()
    await asyncio.sleep(0)

    _admit(scheduler, queue, _record("b", LogLevel.ERROR))
    fake_timer.tick()
    scheduler.on_visibility_hidden()
    assert scheduler.trigger("manual") is False
    assert await scheduler.flush() is False

    assert fake_timer.pending == []
    assert transport.started == 1
    transport.release()
    await asyncio.gather(*tasks)
    assert _names(queue) == ["b"]


@pytest.mark.asyncio
async def test_failed_send_requeues_snapshot_ahead_of_newer_records(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport(results=[False], gated=True)
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    for name in ("s1", "s2", "s3"):
        _admit(scheduler, queue, _record(name))
    fake_timer.tick()
    tasks = fake_timer.start_pending()
    await asyncio.sleep(0)

    _admit(scheduler, queue, _record("n1"))
    _admit(scheduler, queue, _record("n2"))
    transport.release()
    await asyncio.gather(*tasks)

    assert _names(queue) == ["s1", "s2", "s3", "n1", "n2"]
    assert scheduler.state is SchedulerState.WAITING
    assert len(fake_timer.active) == 1
    assert ("flush_failed", {"records": 3, "queued": 5}) in diagnostics.events


@pytest.mark.asyncio
async def test_success_removes_exactly_the_snapshot(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport(gated=True)
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("s1"))
    fake_timer.tick()
    tasks = fake_timer.start_pending()
    await asyncio.sleep(0)

    _admit(scheduler, queue, _record("n1"))
    transport.release()
    await asyncio.gather(*tasks)

    assert _names(queue) == ["n1"]
    assert scheduler.state is SchedulerState.WAITING


@pytest.mark.asyncio
async def test_requeue_overflow_trims_oldest(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport(results=[False], gated=True)
    scheduler, queue = _build(fake_timer, transport, diagnostics, max_records=4)
    for name in ("s1", "s2", "s3"):
        _admit(scheduler, queue, _record(name))
    fake_timer.tick()
    tasks = fake_timer.start_pending()
    await asyncio.sleep(0)
    _admit(scheduler, queue, _record("n1"))
    _admit(scheduler, queue, _record("n2"))

    transport.release()
    await asyncio.gather(*tasks)

    assert _names(queue) == ["s2", "s3", "n1", "n2"]
    assert ("requeue_trimmed", {"records": 1}) in diagnostics.events


@pytest.mark.asyncio
async def test_transport_exception_is_treated_as_failure(
    fake_timer, make_transport, diagnostics, caplog: pytest.LogCaptureFixture
) -> None:
    transport = make_transport(results=[ConnectionError("refused")])
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("a"))

    with caplog.at_level(logging.WARNING, logger="lib_log_relay.application.use_cases.flush"):
        delivered = await scheduler.flush()

    assert delivered is False
    assert _names(queue) == ["a"]
    assert "Error sending logs to collector" in caplog.text


def test_tick_on_empty_queue_goes_idle(fake_timer, make_transport, diagnostics) -> None:
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)
    _admit(scheduler, queue, _record("a"))
    queue.drain()

    fake_timer.tick()

    assert scheduler.state is SchedulerState.IDLE
    assert fake_timer.active == []


def test_teardown_beacons_queue_and_cancels_timer(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport()
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    for index in range(5):
        _admit(scheduler, queue, _record(f"r{index}"))

    handed_off = scheduler.teardown()

    assert handed_off == 5
    assert len(transport.beacons) == 1
    assert _names(transport.beacons[0]) == ["r0", "r1", "r2", "r3", "r4"]
    assert fake_timer.handles[0].cancelled is True
    assert len(queue) == 0
    assert scheduler.state is SchedulerState.IDLE
    assert transport.sent == []


def test_teardown_with_empty_queue_skips_beacon(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport()
    scheduler, _queue = _build(fake_timer, transport, diagnostics)

    assert scheduler.teardown() == 0
    assert transport.beacons == []


def test_admissions_after_teardown_do_not_rearm(fake_timer, make_transport, diagnostics) -> None:
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)
    scheduler.teardown()

    _admit(scheduler, queue, _record("late", LogLevel.ERROR))

    assert fake_timer.handles == []
    assert fake_timer.pending == []
    assert scheduler.closed is True


def test_beacon_failure_is_swallowed(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport()

    def broken_beacon(records: object) -> None:
        raise OSError("network down")

    transport.beacon = broken_beacon
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("a"))

    assert scheduler.teardown() == 1
    assert "beacon_failed" in diagnostics.names()


@pytest.mark.asyncio
async def test_failure_after_teardown_is_a_lost_batch(fake_timer, make_transport, diagnostics) -> None:
    transport = make_transport(results=[False], gated=True)
    scheduler, queue = _build(fake_timer, transport, diagnostics)
    _admit(scheduler, queue, _record("in-flight"))
    fake_timer.tick()
    tasks = fake_timer.start_pending()
    await asyncio.sleep(0)
    _admit(scheduler, queue, _record("queued"))

    scheduler.teardown()
    transport.release()
    await asyncio.gather(*tasks)

    assert _names(transport.beacons[0]) == ["queued"]
    assert len(queue) == 0
    assert ("flush_lost", {"records": 1}) in diagnostics.events
    assert scheduler.state is SchedulerState.IDLE


def test_without_event_loop_records_stay_queued(fake_timer, make_transport, diagnostics) -> None:
    fake_timer.available = False
    scheduler, queue = _build(fake_timer, make_transport(), diagnostics)

    _admit(scheduler, queue, _record("a"))
    _admit(scheduler, queue, _record("boom", LogLevel.ERROR))

    assert _names(queue) == ["a", "boom"]
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.in_flight == ()
