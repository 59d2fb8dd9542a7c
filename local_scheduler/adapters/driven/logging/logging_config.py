"""Console logging setup for the local scheduler."""

import logging
import os

__all__ = ["configure_logs", "LOG_FORMAT"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"

_HANDLER_NAME = "local_scheduler.console"


def configure_logs(level: str | None = None) -> None:
    """Configure console logging for the scheduler process.

    The root logger gets a single stream handler (repeated calls do not stack
    handlers). aiohttp and asyncio are held at WARNING; the local_scheduler
    package logs at ``level``, falling back to the LOG_LEVEL environment
    variable and then DEBUG.

    Args:
        level: Level name for the application loggers.
    """
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    app_level = (level or os.getenv("LOG_LEVEL") or "DEBUG").upper()
    logging.getLogger("local_scheduler").setLevel(app_level)
