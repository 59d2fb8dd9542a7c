"""One trigger of the single scheduler endpoint."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from local_scheduler.ports.http import TriggerRequest, TriggerResponse, secret_headers
from local_scheduler.ports.stats import StatsPort, TriggerStatus

__all__ = ["trigger_once", "RequestFn", "describe_error", "elapsed_ms"]

logger = logging.getLogger(__name__)

RequestFn = Callable[[TriggerRequest], Awaitable[TriggerResponse]]


def elapsed_ms(started: float) -> int:
    """Milliseconds since a time.perf_counter() reading."""
    return int((time.perf_counter() - started) * 1000)


def describe_error(exc: BaseException) -> str:
    """Return a readable description for exceptions with empty messages (timeouts)."""
    return str(exc) or type(exc).__name__


async def trigger_once(
    request_fn: RequestFn,
    endpoint_url: str,
    secret: str,
    stats: StatsPort,
) -> TriggerStatus:
    """POST to the scheduler endpoint once and record the outcome.

    Never raises for HTTP or transport failures: non-2xx statuses,
    connection errors, timeouts and malformed JSON bodies are counted as
    failed triggers and logged. The statistics snapshot is logged after
    every attempt.

    Args:
        request_fn: Async function sending one request.
        endpoint_url: Trigger endpoint URL.
        secret: Value of the X-Scheduler-Secret header.
        stats: Counters to update.

    Returns:
        Outcome of the attempt.
    """
    started = time.perf_counter()
    fired_at = stats.begin_attempt()
    logger.info(f"Triggering {endpoint_url} at {fired_at.isoformat()}")

    req = TriggerRequest(url=endpoint_url, headers=secret_headers(secret), payload={})
    try:
        resp = await request_fn(req)
        if resp.ok:
            result = resp.json()
            status = TriggerStatus.SUCCESS
            logger.info(f"Trigger successful in {elapsed_ms(started)}ms, response: {result}")
        else:
            status = TriggerStatus.FAILED
            logger.error(
                f"Trigger failed with {resp.status} {resp.reason} "
                f"in {elapsed_ms(started)}ms: {resp.text}"
            )
    except asyncio.CancelledError:
        stats.record(TriggerStatus.FAILED)
        raise
    except Exception as e:  # noqa: BLE001
        status = TriggerStatus.FAILED
        logger.error(f"Request error after {elapsed_ms(started)}ms: {describe_error(e)}")

    stats.record(status)
    logger.info(f"Scheduler statistics: {stats.snapshot()}")
    return status
