"""In-memory counters for trigger attempts."""

from __future__ import annotations

from datetime import datetime, timezone

from local_scheduler.ports.stats import StatsPort, StatsSnapshot, TriggerStatus

__all__ = ["TriggerStatistics"]


class TriggerStatistics(StatsPort):
    """Process-lifetime trigger counters.

    Tracks:
    - Total, successful and failed attempts.
    - Time of the most recent attempt.
    - Outcome of the most recent attempt.

    Not thread-safe; mutate only from the event loop that drives the ticks.
    """

    def __init__(self) -> None:
        self._total: int = 0
        self._successful: int = 0
        self._failed: int = 0
        self._last_trigger_time: datetime | None = None
        self._last_status: TriggerStatus | None = None

    def begin_attempt(self) -> datetime:
        """Count a new attempt.

        Returns:
            The attempt start time (UTC).
        """
        self._total += 1
        self._last_trigger_time = datetime.now(timezone.utc)
        return self._last_trigger_time

    def record(self, status: TriggerStatus) -> None:
        """Record a completed attempt.

        Args:
            status: Outcome of the attempt.
        """
        if status is TriggerStatus.SUCCESS:
            self._successful += 1
        else:
            self._failed += 1
        self._last_status = status

    def snapshot(self) -> StatsSnapshot:
        """Return an immutable copy of the counters."""
        return StatsSnapshot(
            total=self._total,
            successful=self._successful,
            failed=self._failed,
            last_trigger_time=self._last_trigger_time,
            last_status=self._last_status,
        )

    def __str__(self) -> str:
        return str(self.snapshot())
