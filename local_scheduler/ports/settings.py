"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["SettingsPort"]


@dataclass(frozen=True)
class SettingsPort:
    """Runtime settings for the trigger loop.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        period_in_sec: Seconds between ticks.
        endpoint_urls: Trigger endpoints keyed by name, in call order.
        scheduler_secret: Value of the X-Scheduler-Secret header, if any.
        auth_token: Bearer token for the Authorization header, if any.
        skip_if_busy: Skip a tick while the previous one is still running.
    """

    period_in_sec: float
    endpoint_urls: dict[str, str]
    scheduler_secret: str | None = None
    auth_token: str | None = None
    skip_if_busy: bool = False
