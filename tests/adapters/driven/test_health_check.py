"""Tests for the configuration check command."""
from unittest.mock import patch

from local_scheduler.adapters.driven.config.health_check import main
from local_scheduler.adapters.driven.config.settings import ConfigurationError, Settings

__all__ = []


def test_health_check_success() -> None:
    """Check should return 0 when configuration loads successfully."""
    with patch("local_scheduler.adapters.driven.config.health_check.load_settings") as mock_load:
        mock_load.return_value = Settings(interval_ms=30_000, scheduler_secret="s")
        result = main()

    assert result == 0


def test_health_check_passes_with_short_interval_warning() -> None:
    """Advisory interval warnings should not fail the check."""
    with patch("local_scheduler.adapters.driven.config.health_check.load_settings") as mock_load:
        mock_load.return_value = Settings(interval_ms=500, scheduler_secret="s")
        result = main()

    assert result == 0


def test_health_check_failure_on_config_error() -> None:
    """Check should return 1 when configuration fails to load."""
    with patch("local_scheduler.adapters.driven.config.health_check.load_settings") as mock_load:
        mock_load.side_effect = ConfigurationError("SCHEDULER_SECRET environment variable is required")
        result = main()

    assert result == 1
