"""Tests for AsyncProducerTimer."""
from __future__ import annotations

import asyncio
import time

import pytest

from tick_timer import AsyncProducerTimer, ManualScheduler, ProducerError


@pytest.mark.asyncio
async def test_emits_data_after_producer_completes():
    scheduler = ManualScheduler()

    async def produce():
        await asyncio.sleep(0)
        return "ok"

    timer = AsyncProducerTimer(produce, 1000, scheduler=scheduler)
    received = []
    timer.on("data", lambda result, ts, interval: received.append((result, ts, interval)))

    timer.start()
    scheduler.advance(1.0)

    # The loop step returned before the producer ran.
    assert received == []
    assert timer.pending == 1

    await timer.drain()

    assert timer.pending == 0
    result, ts, interval = received[0]
    assert result == "ok"
    assert interval == 1000
    assert abs(time.time() - ts) <= 1


@pytest.mark.asyncio
async def test_rejection_emits_error_not_data():
    scheduler = ManualScheduler()
    boom = ValueError("boom")

    async def produce():
        raise boom

    timer = AsyncProducerTimer(produce, 1000, True, scheduler=scheduler)
    errors = []
    data = []
    timer.on("error", errors.append)
    timer.on("data", lambda *payload: data.append(payload))

    scheduler.advance(1.0)
    await timer.drain()

    assert errors == [boom]
    assert data == []


@pytest.mark.asyncio
async def test_rejection_swallowed_by_default():
    scheduler = ManualScheduler()

    async def produce():
        raise ValueError("boom")

    timer = AsyncProducerTimer(produce, 1000, True, scheduler=scheduler)

    scheduler.advance(2.0)
    await timer.drain()

    assert timer.running


@pytest.mark.asyncio
async def test_cancelled_producer_normalised():
    scheduler = ManualScheduler()

    async def produce():
        raise asyncio.CancelledError()

    timer = AsyncProducerTimer(produce, 1000, scheduler=scheduler)
    errors = []
    timer.on("error", errors.append)

    timer.tick()
    await timer.drain()

    assert len(errors) == 1
    assert isinstance(errors[0], ProducerError)
    assert isinstance(errors[0].value, asyncio.CancelledError)


@pytest.mark.asyncio
async def test_overlapping_runs_allowed():
    scheduler = ManualScheduler()
    release = asyncio.Event()
    started = []

    async def produce():
        started.append(scheduler.now)
        await release.wait()
        return len(started)

    timer = AsyncProducerTimer(produce, 1000, True, scheduler=scheduler)
    results = []
    timer.on("data", lambda result, ts, interval: results.append(result))

    scheduler.advance(1.0)
    await asyncio.sleep(0)
    scheduler.advance(1.0)
    await asyncio.sleep(0)

    assert timer.pending == 2
    assert started == [1.0, 2.0]

    release.set()
    await timer.drain()

    assert results == [2, 2]


@pytest.mark.asyncio
async def test_stop_does_not_cancel_in_flight_run():
    scheduler = ManualScheduler()
    release = asyncio.Event()

    async def produce():
        await release.wait()
        return "late"

    timer = AsyncProducerTimer(produce, 1000, True, scheduler=scheduler)
    results = []
    timer.on("data", lambda result, ts, interval: results.append(result))

    scheduler.advance(1.0)
    timer.stop()
    release.set()
    await timer.drain()

    assert results == ["late"]


@pytest.mark.asyncio
async def test_destroy_keeps_in_flight_run_but_stops_loop():
    scheduler = ManualScheduler()
    release = asyncio.Event()
    calls = []

    async def produce():
        calls.append(True)
        await release.wait()
        return "done"

    timer = AsyncProducerTimer(produce, 1000, True, scheduler=scheduler)
    results = []
    timer.on("data", lambda result, ts, interval: results.append(result))

    scheduler.advance(1.0)
    timer.destroy()
    scheduler.advance(5.0)
    release.set()
    await timer.drain()

    assert timer.destroyed
    assert scheduler.pending == 0
    assert calls == [True]
    assert results == ["done"]


@pytest.mark.asyncio
async def test_explicit_loop():
    loop = asyncio.get_running_loop()

    async def produce():
        return 42

    timer = AsyncProducerTimer(produce, 1000, scheduler=ManualScheduler(), loop=loop)
    results = []
    timer.on("data", lambda result, ts, interval: results.append(result))

    timer.tick()
    await timer.drain()

    assert results == [42]


@pytest.mark.asyncio
async def test_drain_with_nothing_pending():
    async def produce():
        return None

    timer = AsyncProducerTimer(produce, 1000, scheduler=ManualScheduler())
    await timer.drain()
    assert timer.pending == 0


def test_tick_without_loop_reports_error():
    async def produce():
        return None

    timer = AsyncProducerTimer(produce, 1000, scheduler=ManualScheduler())
    errors = []
    timer.on("error", errors.append)

    timer.tick()

    assert len(errors) == 1
    assert isinstance(errors[0], RuntimeError)
    assert timer.pending == 0


@pytest.mark.asyncio
async def test_reports_interval_at_tick_time():
    """An interval change after the tick does not alter the reported interval."""

    async def produce():
        return "ok"

    timer = AsyncProducerTimer(produce, 1000, scheduler=ManualScheduler())
    intervals = []
    timer.on("data", lambda result, ts, interval: intervals.append(interval))

    timer.tick()
    timer.interval = 250
    await timer.drain()

    assert intervals == [1000]
