"""Configuration check run before starting the scheduler."""

import logging

from local_scheduler.adapters.driven.config.settings import load_settings, validate_settings
from local_scheduler.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Check that the scheduler configuration is usable.

    Validates:
    - Required environment variables are set.
    - Interval, URL and port values parse and pass validation.

    Advisory interval warnings are logged but do not fail the check.

    Returns:
        0 if valid, 1 if invalid.
    """
    configure_logs()

    try:
        settings = load_settings()
    except Exception as exc:
        logger.error(f"Scheduler configuration check FAILED: {exc}")
        return 1

    validate_settings(settings)
    logger.info("Scheduler configuration check OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
