"""Sleep-window primitives and the scheduler configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from pydantic import BaseModel, field_validator

from .durations import HOUR_MS, MINUTE_MS, parse_clock

DEFAULT_BUFFER_MINUTES = 120
DEFAULT_LONG_TASK_HOURS = 6


@dataclass(slots=True, frozen=True)
class SleepWindow:
    """A concrete sleep interval; ``end`` is always after ``start``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end <= self.start:
            object.__setattr__(self, "end", self.end + timedelta(days=1))

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @classmethod
    def anchored(cls, now: datetime, start: time, end: time) -> SleepWindow:
        """Return the daily window containing ``now``, or the next one to begin after it."""

        today = now.replace(hour=start.hour, minute=start.minute, second=0, microsecond=0)
        for offset in (-1, 0, 1):
            begin = today + timedelta(days=offset)
            window = cls(begin, _on_day(begin, end))
            if now <= window.end:
                return window
        raise AssertionError("unreachable: a window always ends within two days of now")


def _on_day(day: datetime, moment: time) -> datetime:
    return day.replace(hour=moment.hour, minute=moment.minute, second=0, microsecond=0)


class SchedulerConfig(BaseModel):
    """User-editable settings consumed by the optimizer and the assignment engine.

    Attributes
    ----------
    sleep_start / sleep_end:
        Time of day the owner goes to sleep and wakes up; an end at or before the start wraps
        past midnight.
    auto_optimize:
        When ``True`` the queue is reordered by the optimizer before schedules are generated.
    sleep_time_of_day:
        ``"HH:MM"`` bedtime used by the start-time goodness heuristic on schedule entries.
    sleep_duration_hours:
        Hours of sleep (1..12), kept alongside ``sleep_time_of_day``.
    buffer_minutes:
        Minimum gap before sleep for a short task to count as well placed.
    long_task_hours:
        Tasks longer than this are treated as long (overnight) candidates.
    """

    sleep_start: time = time(22, 0)
    sleep_end: time = time(6, 0)
    auto_optimize: bool = True
    sleep_time_of_day: str = "22:00"
    sleep_duration_hours: int = 8
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES
    long_task_hours: int = DEFAULT_LONG_TASK_HOURS

    @field_validator("sleep_time_of_day")
    @classmethod
    def _valid_clock(cls, value: str) -> str:
        parsed = parse_clock(value)
        return f"{parsed.hour:02d}:{parsed.minute:02d}"

    @field_validator("sleep_duration_hours")
    @classmethod
    def _sleep_duration_range(cls, value: int) -> int:
        if not 1 <= value <= 12:
            raise ValueError("sleep_duration_hours must be between 1 and 12")
        return value

    @field_validator("buffer_minutes", "long_task_hours")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("buffer_minutes/long_task_hours must be non-negative")
        return value

    @property
    def buffer_ms(self) -> int:
        return self.buffer_minutes * MINUTE_MS

    @property
    def long_threshold_ms(self) -> int:
        return self.long_task_hours * HOUR_MS

    @property
    def sleep_hour(self) -> int:
        return parse_clock(self.sleep_time_of_day).hour

    def window_for(self, now: datetime) -> SleepWindow:
        return SleepWindow.anchored(now, self.sleep_start, self.sleep_end)


__all__ = [
    "DEFAULT_BUFFER_MINUTES",
    "DEFAULT_LONG_TASK_HOURS",
    "SleepWindow",
    "SchedulerConfig",
]
