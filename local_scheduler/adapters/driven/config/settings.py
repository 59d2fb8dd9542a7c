"""Configuration loading from environment variables."""

import logging
import os
from collections.abc import Mapping
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, field_validator

__all__ = [
    "ConfigurationError",
    "Settings",
    "build_base_url",
    "build_endpoint_url",
    "build_endpoint_urls",
    "load_settings",
    "mask_secret",
    "validate_settings",
]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

DEFAULT_APP_URL = "http://localhost"
DEFAULT_INTERVAL_MS = {"single": 30_000, "multi": 60_000}
HIGH_LOAD_INTERVAL_MS = 1_000
RECOMMENDED_MIN_INTERVAL_MS = 5_000

TRIGGER_PATH = "/api/scheduler/trigger"
MULTI_ENDPOINT_PATHS = {
    "queries": "/api/scheduler/trigger",
    "cleanups": "/api/scheduler/trigger-cleanups",
    "outputs": "/api/scheduler/trigger-outputs",
}

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or unparsable."""


class Settings(BaseModel):
    """Runtime configuration for the local scheduler.

    Attributes:
        mode: "single" posts to one endpoint with a shared secret,
            "multi" posts to the queries/cleanups/outputs endpoints.
        interval_ms: Milliseconds between triggers (must be positive).
        scheduler_secret: Value sent as X-Scheduler-Secret (single mode).
        auth_token: Optional bearer token (multi mode).
        app_url: Base address of the target application.
        app_port: Optional port appended to app_url.
        skip_if_busy: Skip a tick while the previous one is still running.
    """

    model_config = ConfigDict(frozen=True)

    mode: Literal["single", "multi"] = "single"
    interval_ms: int = Field(..., gt=0, description="Milliseconds between triggers.")
    scheduler_secret: str | None = Field(default=None, description="Shared scheduler secret.")
    auth_token: str | None = Field(default=None, description="Bearer token for multi mode.")
    app_url: str = Field(default=DEFAULT_APP_URL, description="Target application base URL.")
    app_port: int | None = Field(default=None, ge=1, le=65535)
    skip_if_busy: bool = False

    @field_validator("app_url")
    @classmethod
    def validate_app_url(cls, v: str) -> str:
        """Validate that the base URL is an http(s) URL.

        Args:
            v: Base URL to validate.

        Returns:
            The URL without trailing slash.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
            if url.scheme not in ("http", "https"):
                raise ValueError("Only http:// or https:// URLs allowed")
        except Exception as e:
            raise ValueError(f"Invalid APP_URL: {e}") from e
        return v.rstrip("/")

    @property
    def interval_sec(self) -> float:
        return self.interval_ms / 1000


def _parse_int(environ: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer (got: {raw})") from e


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load and validate settings from the environment.

    Recognized variables:
    - SCHEDULER_MODE: "single" (default) or "multi".
    - SCHEDULER_INTERVAL: Milliseconds between triggers (30000 single, 60000 multi).
    - SCHEDULER_SECRET: Shared secret, required in single mode.
    - SCHEDULER_AUTH_TOKEN: Optional bearer token for multi mode.
    - APP_URL: Target application base URL (default http://localhost).
    - APP_PORT: Optional port appended to APP_URL.
    - SCHEDULER_SKIP_IF_BUSY: Skip overlapping ticks when truthy.

    Args:
        environ: Configuration source; defaults to the process environment.

    Returns:
        Validated Settings object.

    Raises:
        ConfigurationError: If a required variable is missing or unparsable.
        ValueError: If configuration is invalid.
    """
    if environ is None:
        environ = os.environ

    mode = environ.get("SCHEDULER_MODE", "single").strip().lower() or "single"
    if mode not in DEFAULT_INTERVAL_MS:
        raise ConfigurationError(f"SCHEDULER_MODE must be 'single' or 'multi' (got: {mode})")

    scheduler_secret = environ.get("SCHEDULER_SECRET", "")
    if mode == "single" and not scheduler_secret:
        raise ConfigurationError("SCHEDULER_SECRET environment variable is required")

    settings = Settings(
        mode=mode,
        interval_ms=_parse_int(environ, "SCHEDULER_INTERVAL", DEFAULT_INTERVAL_MS[mode]),
        scheduler_secret=scheduler_secret or None,
        auth_token=environ.get("SCHEDULER_AUTH_TOKEN") or None,
        app_url=environ.get("APP_URL") or DEFAULT_APP_URL,
        app_port=_parse_int(environ, "APP_PORT", None),
        skip_if_busy=environ.get("SCHEDULER_SKIP_IF_BUSY", "").strip().lower() in _TRUE_VALUES,
    )

    logger.debug(
        f"Scheduler configured: mode={settings.mode}, interval={settings.interval_ms}ms, "
        f"base_url={build_base_url(settings)}"
    )

    return settings


def build_base_url(settings: Settings) -> str:
    """Return app_url with app_port appended when one is set."""
    if settings.app_port:
        return f"{settings.app_url}:{settings.app_port}"
    return settings.app_url


def build_endpoint_url(settings: Settings) -> str:
    """Build the single-endpoint trigger URL."""
    return f"{build_base_url(settings)}{TRIGGER_PATH}"


def build_endpoint_urls(settings: Settings) -> dict[str, str]:
    """Build the queries, cleanups and outputs trigger URLs, in call order."""
    base = build_base_url(settings)
    return {name: f"{base}{path}" for name, path in MULTI_ENDPOINT_PATHS.items()}


def validate_settings(settings: Settings) -> list[str]:
    """Log advisory warnings about the configuration.

    Returns:
        The warnings that were logged (empty when none apply).
    """
    warnings: list[str] = []
    if settings.interval_ms < HIGH_LOAD_INTERVAL_MS:
        warnings.append("Interval is less than 1 second. This may cause high load.")
    if settings.interval_ms < RECOMMENDED_MIN_INTERVAL_MS:
        warnings.append("Interval is less than 5 seconds. Consider using a longer interval.")

    for warning in warnings:
        logger.warning(warning)
    return warnings


def mask_secret(value: str | None, visible: int = 10) -> str:
    """Return the first characters of a secret for display."""
    if not value:
        return "<none>"
    return f"{value[:visible]}..."
