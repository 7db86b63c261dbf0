"""Spaced-repetition scheduling policy.

A correct answer moves one step along a fixed table of day intervals (the
last step repeats); a miss resets the streak and brings the drill back after
a short retry delay.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from drill_engine.models.drill_queue import STATUS_DUE, STATUS_SCHEDULED

DEFAULT_INTERVAL_DAYS = (1, 2, 3, 5, 8, 13, 14)
DEFAULT_RETRY_MINUTES = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Schedule:
    repetition: int
    due_at: datetime
    status: str


class SchedulingPolicy:
    def __init__(self, interval_days=DEFAULT_INTERVAL_DAYS, retry_minutes: int = DEFAULT_RETRY_MINUTES):
        if not interval_days:
            raise ValueError("interval_days must not be empty")
        self.interval_days = tuple(interval_days)
        self.retry_delay = timedelta(minutes=retry_minutes)

    @classmethod
    def from_settings(cls, settings) -> "SchedulingPolicy":
        return cls(settings.interval_days, settings.retry_minutes)

    def interval_for(self, repetition: int) -> timedelta:
        """Interval after reaching ``repetition`` consecutive correct answers (>= 1)."""
        index = min(max(repetition, 1) - 1, len(self.interval_days) - 1)
        return timedelta(days=self.interval_days[index])

    def next_schedule(self, repetition: int, correct: bool, now: datetime) -> Schedule:
        if correct:
            new_repetition = max(repetition, 0) + 1
            return Schedule(new_repetition, now + self.interval_for(new_repetition), STATUS_SCHEDULED)
        return Schedule(0, now + self.retry_delay, STATUS_DUE)
