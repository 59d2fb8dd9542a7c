"""Scheduler that triggers the queries, cleanups and outputs endpoints."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from local_scheduler.core.event_loop import start_main_loop
from local_scheduler.core.trigger import RequestFn, describe_error, elapsed_ms
from local_scheduler.ports.http import TriggerRequest, bearer_headers
from local_scheduler.ports.settings import SettingsPort
from local_scheduler.ports.stats import StatsPort, StatsSnapshot, TriggerStatus

__all__ = [
    "ENDPOINT_KINDS",
    "EndpointKind",
    "ItemResult",
    "MultiEndpointScheduler",
    "TriggerEnvelope",
]

logger = logging.getLogger(__name__)


class ItemResult(BaseModel):
    """Outcome of one query, cleanup or output run by the host application."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    error: str | None = None
    deleted_count: int | None = None
    sent_count: int | None = None

    def pick(self, keys: tuple[str, ...]) -> Any:
        """Return the first present value among extra fields ``keys``."""
        extra = self.model_extra or {}
        for key in keys:
            if extra.get(key) is not None:
                return extra[key]
        return None


class TriggerData(BaseModel):
    executed_count: int = 0
    results: list[ItemResult] = Field(default_factory=list)


class TriggerEnvelope(BaseModel):
    """Top-level JSON response of a trigger endpoint."""

    success: bool
    data: TriggerData | None = None
    error: str | None = None


@dataclass(frozen=True)
class EndpointKind:
    """How to report the items returned by one endpoint.

    Attributes:
        label: Prefix for log lines.
        name_keys: Item fields holding the display name, by preference.
        id_keys: Item fields holding the identifier, by preference.
        counter_key: Item field with the endpoint's counter, if any.
        counter_label: Label printed before the counter.
    """

    label: str
    name_keys: tuple[str, ...] = ("name",)
    id_keys: tuple[str, ...] = ("id",)
    counter_key: str | None = None
    counter_label: str = ""


ENDPOINT_KINDS: dict[str, EndpointKind] = {
    "queries": EndpointKind(
        label="Queries",
        name_keys=("query_name", "name"),
        id_keys=("query_id", "id"),
    ),
    "cleanups": EndpointKind(
        label="Cleanups",
        name_keys=("cleanup_name", "name"),
        id_keys=("cleanup_id", "id"),
        counter_key="deleted_count",
        counter_label="deleted",
    ),
    "outputs": EndpointKind(
        label="Outputs",
        name_keys=("output_name", "name"),
        id_keys=("output_id", "id"),
        counter_key="sent_count",
        counter_label="sent",
    ),
}


def _report_results(kind: EndpointKind, data: TriggerData | None) -> None:
    if data is None or data.executed_count == 0:
        logger.info(f"[{kind.label}] Nothing due")
        return

    logger.info(f"[{kind.label}] Executed {data.executed_count}")
    for item in data.results:
        marker = "OK" if item.success else "FAILED"
        line = f"[{kind.label}]   {marker} {item.pick(kind.name_keys)} ({item.pick(kind.id_keys)})"
        if kind.counter_key:
            line += f" {kind.counter_label}={getattr(item, kind.counter_key) or 0}"
        if item.success:
            logger.info(line)
        else:
            logger.warning(f"{line}: {item.error or 'no error message'}")


class MultiEndpointScheduler:
    """Triggers every configured endpoint once per tick.

    Endpoints are called sequentially in configuration order, each isolated
    so a failure on one does not prevent the others from running. Each
    endpoint keeps its own statistics.

    States: stopped -> running on start(), running -> stopped on stop().
    Both transitions are idempotent.
    """

    def __init__(
        self,
        settings: SettingsPort,
        request_fn: RequestFn,
        stats_factory: Callable[[], StatsPort],
    ) -> None:
        """Initialize the scheduler in the stopped state.

        Args:
            settings: Runtime settings (period, endpoints, bearer token).
            request_fn: Async function sending one request.
            stats_factory: Creates the statistics holder for each endpoint.
        """
        self.settings = settings
        self._request_fn = request_fn
        self._stats: dict[str, StatsPort] = {
            name: stats_factory() for name in settings.endpoint_urls
        }
        self._running = False
        self._stop: asyncio.Event | None = None
        self._task: asyncio.Task[int] | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def stats(self) -> dict[str, StatsSnapshot]:
        """Return a snapshot of the counters of every endpoint."""
        return {name: stats.snapshot() for name, stats in self._stats.items()}

    def start(self) -> None:
        """Start triggering; the first tick runs immediately.

        Must be called from inside the running event loop.
        """
        if self._running:
            logger.info("Scheduler is already running")
            return

        self._stop = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(
            start_main_loop(
                self.settings.period_in_sec,
                self._stop,
                self.run_tick,
                skip_if_busy=self.settings.skip_if_busy,
            )
        )
        self._running = True
        logger.info(
            f"Scheduler started: {len(self.settings.endpoint_urls)} endpoints "
            f"every {self.settings.period_in_sec}s"
        )

    async def stop(self) -> None:
        """Stop triggering.

        Cancels the timer and any tick in flight; no request is sent once
        this returns.
        """
        if not self._running:
            logger.info("Scheduler is not running")
            return

        self._running = False
        task, self._task = self._task, None
        if self._stop is not None:
            self._stop.set()
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Scheduler stopped")

    async def run_tick(self) -> dict[str, TriggerStatus]:
        """Trigger every endpoint once, in order.

        Returns:
            Outcome per endpoint name.
        """
        logger.info(f"Running scheduled jobs at {datetime.now(timezone.utc).isoformat()}")
        outcomes: dict[str, TriggerStatus] = {}
        for name, url in self.settings.endpoint_urls.items():
            outcomes[name] = await self._trigger_endpoint(name, url)
        return outcomes

    async def _trigger_endpoint(self, name: str, url: str) -> TriggerStatus:
        kind = ENDPOINT_KINDS.get(name) or EndpointKind(label=name)
        stats = self._stats[name]
        started = time.perf_counter()
        stats.begin_attempt()

        status = TriggerStatus.FAILED
        req = TriggerRequest(url=url, headers=bearer_headers(self.settings.auth_token))
        try:
            resp = await self._request_fn(req)
            if not resp.ok:
                logger.error(f"[{kind.label}] HTTP {resp.status} {resp.reason}: {resp.text}")
            else:
                envelope = TriggerEnvelope.model_validate_json(resp.text)
                if envelope.success:
                    status = TriggerStatus.SUCCESS
                    _report_results(kind, envelope.data)
                else:
                    logger.error(f"[{kind.label}] Trigger failed: {envelope.error or 'unknown error'}")
        except asyncio.CancelledError:
            stats.record(TriggerStatus.FAILED)
            raise
        except Exception as e:  # noqa: BLE001
            logger.error(f"[{kind.label}] Error calling {url}: {describe_error(e)}")

        stats.record(status)
        logger.info(f"[{kind.label}] {elapsed_ms(started)}ms | {stats.snapshot()}")
        return status
