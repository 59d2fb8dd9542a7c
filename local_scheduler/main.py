"""Application entrypoint."""

import asyncio
import functools
import logging

from local_scheduler.adapters.driven.config.settings import (
    Settings,
    build_endpoint_url,
    build_endpoint_urls,
    load_settings,
    mask_secret,
    validate_settings,
)
from local_scheduler.adapters.driven.http.client import HttpClient
from local_scheduler.adapters.driven.logging.logging_config import configure_logs
from local_scheduler.adapters.driven.stats.trigger_stats import TriggerStatistics
from local_scheduler.adapters.driving.signals import make_stop_event
from local_scheduler.core.event_loop import start_main_loop
from local_scheduler.core.multi_endpoint import MultiEndpointScheduler
from local_scheduler.core.trigger import trigger_once
from local_scheduler.ports.settings import SettingsPort
from local_scheduler.ports.stats import StatsSnapshot

__all__ = ["main", "run", "EXIT_OK", "EXIT_FATAL", "EXIT_CONFIG_ERROR"]

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG_ERROR = 2


async def main() -> int:
    """Start the local scheduler service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Trigger once immediately, then every interval.
    4. On SIGINT/SIGTERM, log final statistics and stop.

    Returns:
        Process exit code.
    """
    configure_logs()
    logger.info("Starting local scheduler service (stands in for Cloud Scheduler)...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check SCHEDULER_SECRET, SCHEDULER_INTERVAL, APP_URL and APP_PORT "
            "in your .env file or environment.",
            exc,
        )
        return EXIT_CONFIG_ERROR

    try:
        await run_scheduler(config)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return EXIT_FATAL

    return EXIT_OK


def build_settings_port(config: Settings) -> SettingsPort:
    """Wrap validated settings into the port used by the core."""
    if config.mode == "multi":
        endpoint_urls = build_endpoint_urls(config)
    else:
        endpoint_urls = {"trigger": build_endpoint_url(config)}

    return SettingsPort(
        period_in_sec=config.interval_sec,
        endpoint_urls=endpoint_urls,
        scheduler_secret=config.scheduler_secret,
        auth_token=config.auth_token,
        skip_if_busy=config.skip_if_busy,
    )


async def run_scheduler(config: Settings) -> None:
    """Run the configured variant until a shutdown signal arrives."""
    validate_settings(config)
    settings_port = build_settings_port(config)

    credential = config.scheduler_secret if config.mode == "single" else config.auth_token
    logger.info(
        f"Configuration: mode={config.mode}, "
        f"interval={config.interval_ms}ms ({config.interval_sec:g}s), "
        f"endpoints={', '.join(settings_port.endpoint_urls.values())}, "
        f"credential={mask_secret(credential)}"
    )

    stop = make_stop_event()

    async with HttpClient() as http:
        if config.mode == "multi":
            await run_multi_endpoint(settings_port, http, stop)
        else:
            await run_single_endpoint(settings_port, http, stop)

    logger.info("Local scheduler stopped.")


async def run_single_endpoint(
    settings_port: SettingsPort, http: HttpClient, stop: asyncio.Event
) -> StatsSnapshot:
    """Trigger the single endpoint until ``stop`` is set.

    Returns:
        Final statistics.
    """
    stats = TriggerStatistics()
    tick = functools.partial(
        trigger_once,
        http.post,
        settings_port.endpoint_urls["trigger"],
        settings_port.scheduler_secret or "",
        stats,
    )

    logger.info(f"Triggering every {settings_port.period_in_sec:g}s, press Ctrl+C to stop")
    await start_main_loop(
        settings_port.period_in_sec, stop, tick, skip_if_busy=settings_port.skip_if_busy
    )

    final = stats.snapshot()
    logger.info(f"Final statistics: {final}")
    return final


async def run_multi_endpoint(
    settings_port: SettingsPort, http: HttpClient, stop: asyncio.Event
) -> dict[str, StatsSnapshot]:
    """Trigger the queries, cleanups and outputs endpoints until ``stop`` is set.

    Returns:
        Final statistics per endpoint.
    """
    scheduler = MultiEndpointScheduler(settings_port, http.post, TriggerStatistics)
    scheduler.start()
    try:
        await stop.wait()
    finally:
        await scheduler.stop()

    final = scheduler.stats()
    for name, snapshot in final.items():
        logger.info(f"Final statistics [{name}]: {snapshot}")
    return final


def run() -> None:
    """Console-script entrypoint."""
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
        code = EXIT_OK
    raise SystemExit(code)


if __name__ == "__main__":
    run()
