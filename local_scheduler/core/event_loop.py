"""Timer loop that runs a tick immediately and then once per period."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

__all__ = ["start_main_loop", "get_now_time"]

logger = logging.getLogger(__name__)

TickFn = Callable[[], Awaitable[object]]


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Uses event loop's monotonic clock for accurate scheduling
    without wall-clock drift.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


async def start_main_loop(
    period_in_sec: float,
    stop: asyncio.Event,
    tick_fn: TickFn,
    *,
    skip_if_busy: bool = False,
) -> int:
    """Run the trigger loop until ``stop`` is set.

    1. Run one tick and wait for it (or for stop, which cancels it), so the
       first trigger is immediate.
    2. Wait one period (or until stop), then start the next tick as a
       background task (fire-and-forget).
    3. Repeat until stop is set, then cancel in-flight ticks.

    Args:
        period_in_sec: Seconds between ticks.
        stop: Event that ends the loop when set.
        tick_fn: Async function running one tick.
        skip_if_busy: Skip a tick while the previous one is still running
            instead of letting them overlap.

    Returns:
        Number of ticks started.

    Notes:
        - Ticks after the first are not awaited by the loop, so a slow tick
          may overlap the next one unless skip_if_busy is set.
        - Deadlines advance on the monotonic clock from the end of the
          first tick, so slow ticks do not shift the schedule.
    """
    pending: set[asyncio.Task[None]] = set()
    loop = asyncio.get_running_loop()
    ticks = 0

    async def _run_once() -> None:
        """Run one tick and log anything it lets escape."""
        try:
            await tick_fn()
        except asyncio.CancelledError:
            logger.info("Tick cancelled (shutdown).")
        except Exception as e:  # noqa: BLE001
            logger.error(f"Unexpected error in tick: {e}", exc_info=True)
        finally:
            task = asyncio.current_task()
            if task is not None:
                pending.discard(task)

    try:
        if stop.is_set():
            return ticks

        ticks += 1
        first: asyncio.Task[None] = loop.create_task(_run_once())
        pending.add(first)
        stop_waiter = loop.create_task(stop.wait())
        try:
            await asyncio.wait({first, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_waiter.cancel()
        next_tick = get_now_time() + period_in_sec

        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=max(0.0, next_tick - get_now_time()))
                break
            except asyncio.TimeoutError:
                pass

            next_tick += period_in_sec
            if skip_if_busy and pending:
                logger.warning("Previous tick still running, skipping this one.")
                continue

            task: asyncio.Task[None] = loop.create_task(_run_once())
            pending.add(task)
            ticks += 1
    finally:
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    return ticks
