"""Trigger statistics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

__all__ = ["StatsPort", "StatsSnapshot", "TriggerStatus"]


class TriggerStatus(str, Enum):
    """Outcome of one trigger attempt."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class StatsSnapshot:
    """Immutable view of the trigger counters.

    Attributes:
        total: Attempts started.
        successful: Attempts that completed with a success.
        failed: Attempts that completed with a failure.
        last_trigger_time: UTC time of the most recent attempt; None before the first.
        last_status: Outcome of the most recent completed attempt; None before the first.
    """

    total: int = 0
    successful: int = 0
    failed: int = 0
    last_trigger_time: datetime | None = None
    last_status: TriggerStatus | None = None

    @property
    def success_rate(self) -> float:
        """Return successful/total as a percentage rounded to one decimal (0 when empty)."""
        if self.total == 0:
            return 0
        return round(self.successful / self.total * 100, 1)

    def __str__(self) -> str:
        return (
            f"total={self.total} | "
            f"successful={self.successful} | "
            f"failed={self.failed} | "
            f"success_rate={self.success_rate}%"
        )


class StatsPort(Protocol):
    """Interface for recording trigger attempts.

    Core calls begin_attempt() when an attempt starts and record() once it
    completes; presentation layers read snapshot().
    """

    def begin_attempt(self) -> datetime:
        """Count a new attempt and return its start time."""
        ...

    def record(self, status: TriggerStatus, /) -> None:
        """Record the outcome of the attempt started last."""
        ...

    def snapshot(self) -> StatsSnapshot:
        """Return the current counters."""
        ...
