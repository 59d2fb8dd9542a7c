"""Tests for the trigger timer loop."""

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from local_scheduler.core.event_loop import get_now_time, start_main_loop

__all__ = []


def make_n_shot_tick(stop: asyncio.Event, n: int) -> tuple[list[float], Callable[[], Awaitable[None]]]:
    """Create tick function that records its start times and sets stop after N calls.

    Args:
        stop: Event to set.
        n: Number of calls before stopping.

    Returns:
        List of recorded start times and the tick function.
    """
    started: list[float] = []

    async def tick() -> None:
        started.append(get_now_time())
        if len(started) >= n:
            stop.set()

    return started, tick


@pytest.mark.asyncio
async def test_event_loop_runs_first_tick_immediately() -> None:
    """The first tick should not wait for a period."""
    stop = asyncio.Event()
    started, tick = make_n_shot_tick(stop, n=1)

    began = get_now_time()
    ticks = await start_main_loop(period_in_sec=60, stop=stop, tick_fn=tick)

    assert ticks == 1
    assert len(started) == 1
    assert started[0] - began < 1


@pytest.mark.asyncio
async def test_event_loop_second_tick_waits_one_period() -> None:
    """The second tick should fire about one period after the first."""
    period = 0.2
    stop = asyncio.Event()
    started, tick = make_n_shot_tick(stop, n=2)

    await start_main_loop(period_in_sec=period, stop=stop, tick_fn=tick)

    assert len(started) == 2
    assert started[1] - started[0] >= period * 0.9


@pytest.mark.asyncio
async def test_event_loop_calls_tick_function_n_times() -> None:
    """Main loop should run one tick per period until stopped."""
    stop = asyncio.Event()
    started, tick = make_n_shot_tick(stop, n=3)

    ticks = await start_main_loop(period_in_sec=0.01, stop=stop, tick_fn=tick)

    assert ticks == 3
    assert len(started) == 3


@pytest.mark.asyncio
async def test_event_loop_does_not_tick_when_already_stopped() -> None:
    """A stop requested before start should prevent any tick."""
    stop = asyncio.Event()
    stop.set()
    started, tick = make_n_shot_tick(stop, n=1)

    ticks = await start_main_loop(period_in_sec=0.01, stop=stop, tick_fn=tick)

    assert ticks == 0
    assert started == []


@pytest.mark.asyncio
async def test_event_loop_handles_tick_errors_gracefully() -> None:
    """Main loop should keep ticking after a tick raises."""
    stop = asyncio.Event()
    calls = 0

    async def failing_tick() -> None:
        nonlocal calls
        calls += 1
        if calls >= 2:
            stop.set()
        raise RuntimeError("Connection failed")

    # Should not raise, just continue
    await start_main_loop(period_in_sec=0.01, stop=stop, tick_fn=failing_tick)

    assert calls == 2


def make_slow_tick(stop: asyncio.Event, n: int, duration: float) -> tuple[dict[str, int], Callable[[], Awaitable[None]]]:
    """Create tick function that takes ``duration`` seconds and tracks overlap."""
    state = {"calls": 0, "active": 0, "max_active": 0}

    async def tick() -> None:
        state["calls"] += 1
        state["active"] += 1
        state["max_active"] = max(state["max_active"], state["active"])
        if state["calls"] >= n:
            stop.set()
        try:
            await asyncio.sleep(duration)
        finally:
            state["active"] -= 1

    return state, tick


@pytest.mark.asyncio
async def test_event_loop_lets_slow_ticks_overlap_by_default() -> None:
    """Without skip_if_busy a slow tick should not delay the next one."""
    stop = asyncio.Event()
    state, tick = make_slow_tick(stop, n=4, duration=0.05)

    await start_main_loop(period_in_sec=0.01, stop=stop, tick_fn=tick)

    assert state["max_active"] >= 2
    # In-flight ticks are cancelled on shutdown
    assert state["active"] == 0


@pytest.mark.asyncio
async def test_event_loop_skips_ticks_while_busy() -> None:
    """With skip_if_busy at most one tick should run at a time."""
    stop = asyncio.Event()
    state, tick = make_slow_tick(stop, n=3, duration=0.05)

    await start_main_loop(period_in_sec=0.01, stop=stop, tick_fn=tick, skip_if_busy=True)

    assert state["calls"] == 3
    assert state["max_active"] == 1


@pytest.mark.asyncio
async def test_event_loop_stop_cancels_first_tick_in_flight() -> None:
    """A stop during the first tick should cancel it instead of waiting for it."""
    stop = asyncio.Event()
    state = {"cancelled": False}

    async def hanging_tick() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    asyncio.get_running_loop().call_later(0.05, stop.set)
    began = get_now_time()
    ticks = await asyncio.wait_for(
        start_main_loop(period_in_sec=60, stop=stop, tick_fn=hanging_tick), timeout=2
    )

    assert ticks == 1
    assert state["cancelled"] is True
    assert get_now_time() - began < 1
