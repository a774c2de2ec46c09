"""Placement heuristics against the owner's sleep schedule.

Two independent predicates live here:

* :func:`classify_against_sleep_window` tags a task placement ``Optimal``/``Suboptimal`` from its
  completion time relative to a concrete sleep window. The queue optimizer uses it.
* :func:`is_start_time_good_for_sleep_schedule` judges a schedule entry's start hour against the
  configured bedtime hour. The assignment engine uses it for ``ScheduleEntry.is_good_time``.
"""

from __future__ import annotations

from datetime import datetime

from clashplan.scenario.contract.models import Optimality, Task
from clashplan.scheduling.timeline.durations import HOUR_MS, add_millis, millis_between
from clashplan.scheduling.timeline.models import DEFAULT_BUFFER_MINUTES, DEFAULT_LONG_TASK_HOURS

LONG_TASK_MS = DEFAULT_LONG_TASK_HOURS * HOUR_MS
SLEEP_BUFFER_MS = DEFAULT_BUFFER_MINUTES * 60 * 1000
BEDTIME_HOUR_MARGIN = 2
OVERNIGHT_TASK_MS = 8 * HOUR_MS
PRE_BEDTIME_START_HOURS = 3
CLEAR_OF_BEDTIME_HOURS = 8


def classify_against_sleep_window(
    task: Task,
    current_start: datetime,
    sleep_start: datetime,
    sleep_end: datetime,
    *,
    buffer_ms: int = SLEEP_BUFFER_MS,
    long_threshold_ms: int = LONG_TASK_MS,
) -> Optimality:
    """Classify starting ``task`` at ``current_start`` against the sleep window.

    Rules, first match wins:

    1. completion inside ``[sleep_start, sleep_end]``;
    2. a long task completing within two clock hours of bedtime;
    3. a short task completing less than ``buffer_ms`` before bedtime.

    Any match is ``Suboptimal``; otherwise ``Optimal``.
    """

    end = add_millis(current_start, task.duration_ms)
    if sleep_start <= end <= sleep_end:
        return Optimality.SUBOPTIMAL
    is_long = task.duration_ms > long_threshold_ms
    if is_long and abs(end.hour - sleep_start.hour) < BEDTIME_HOUR_MARGIN:
        return Optimality.SUBOPTIMAL
    if not is_long and end < sleep_start and millis_between(end, sleep_start) < buffer_ms:
        return Optimality.SUBOPTIMAL
    return Optimality.OPTIMAL


def is_start_time_good_for_sleep_schedule(duration_ms: int, start_hour: int, sleep_hour: int) -> bool:
    """Return ``True`` when a task starting at ``start_hour`` suits a ``sleep_hour`` bedtime.

    Overnight tasks (> 8h) should start within three hours before bedtime; shorter tasks should
    start more than eight hours away from it.
    """

    if duration_ms > OVERNIGHT_TASK_MS:
        hours_before_sleep = (sleep_hour - start_hour + 24) % 24
        return 0 <= hours_before_sleep <= PRE_BEDTIME_START_HOURS
    return abs(start_hour - sleep_hour) > CLEAR_OF_BEDTIME_HOURS


__all__ = [
    "LONG_TASK_MS",
    "SLEEP_BUFFER_MS",
    "classify_against_sleep_window",
    "is_start_time_good_for_sleep_schedule",
]
