"""Duration helpers and sleep-window configuration."""

from .durations import (
    DAY_MS,
    HOUR_MS,
    MINUTE_MS,
    format_absolute_time,
    format_duration,
    format_duration_short,
    parse_build_time,
    parse_clock,
    split_millis,
    to_millis,
)
from .models import SchedulerConfig, SleepWindow

__all__ = [
    "DAY_MS",
    "HOUR_MS",
    "MINUTE_MS",
    "to_millis",
    "split_millis",
    "format_duration",
    "format_duration_short",
    "format_absolute_time",
    "parse_build_time",
    "parse_clock",
    "SchedulerConfig",
    "SleepWindow",
]
