"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal
from collections.abc import Iterable

__all__ = ["make_stop_event", "SHUTDOWN_SIGNALS"]

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def make_stop_event(signals: Iterable[signal.Signals] = SHUTDOWN_SIGNALS) -> asyncio.Event:
    """Create a stop event set by SIGINT/SIGTERM.

    The entrypoint awaits the returned event instead of keeping the process
    alive with a never-completing task. Must be called from inside the
    running event loop.

    Args:
        signals: Signals that request shutdown.

    Returns:
        Event that is set once a shutdown signal has been received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal(sig: signal.Signals) -> None:
        if stop.is_set():
            return
        logger.info(f"{sig.name} received, stopping scheduler...")
        stop.set()

    for sig in signals:
        loop.add_signal_handler(sig, handle_signal, sig)

    return stop
