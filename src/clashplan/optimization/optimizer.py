"""Sleep-aware reordering of the builder queue.

The optimizer walks a single lane of work starting at ``start_time``: short tasks are packed into
the waking hours while they still finish clear of the sleep window, and everything else (long
tasks plus deferred short ones) is ordered so the task running across the night finishes as soon
as possible after wake-up.

Example
-------
>>> from datetime import datetime
>>> from clashplan.scenario.contract import Task
>>> tasks = [Task(id=1, name="Cannon", duration_ms=3_600_000)]
>>> start = datetime(2024, 1, 1, 10)
>>> [t.optimality.value for t in optimize_queue(
...     tasks, start, datetime(2024, 1, 1, 22), datetime(2024, 1, 2, 6))]
['Optimal']
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from clashplan.optimization.classifier import (
    LONG_TASK_MS,
    SLEEP_BUFFER_MS,
    classify_against_sleep_window,
)
from clashplan.optimization.tiers import PriorityTier, tier_for
from clashplan.scenario.contract.models import Category, Optimality, Task
from clashplan.scheduling.timeline.durations import add_millis, millis_between
from clashplan.scheduling.timeline.models import SchedulerConfig


def _duration(task: Task) -> int:
    assert task.duration_ms >= 0, f"task {task.id} has a negative duration"
    return max(task.duration_ms, 0)


def _tiered_candidates(
    tasks: Sequence[Task],
    long_threshold_ms: int,
    overrides: Mapping[Category, PriorityTier] | None,
) -> list[Task]:
    ordered: list[Task] = []
    for tier in PriorityTier:
        members = [task for task in tasks if tier_for(task, overrides) is tier]
        short = [task for task in members if _duration(task) <= long_threshold_ms]
        long = [task for task in members if _duration(task) > long_threshold_ms]
        short.sort(key=_duration)
        long.sort(key=_duration, reverse=True)
        ordered.extend(short)
        ordered.extend(long)
    return ordered


def optimize_queue(
    tasks: Sequence[Task],
    start_time: datetime,
    sleep_start: datetime,
    sleep_end: datetime,
    *,
    buffer_ms: int = SLEEP_BUFFER_MS,
    long_threshold_ms: int = LONG_TASK_MS,
    overrides: Mapping[Category, PriorityTier] | None = None,
) -> list[Task]:
    """Reorder ``tasks`` around the sleep window and tag each with its optimality.

    Parameters
    ----------
    tasks:
        Pending tasks; their input order is ignored.
    start_time:
        When the lane starts working.
    sleep_start / sleep_end:
        Concrete sleep window (``sleep_end`` after ``sleep_start``).
    buffer_ms:
        Once less than this remains before ``sleep_start`` no further short tasks are packed.
    long_threshold_ms:
        Tasks strictly longer than this are long.
    overrides:
        Optional ``category -> forced minimum tier`` table replacing the default.

    Returns
    -------
    list[Task]
        New task copies with ``optimality`` set; the id multiset equals the input's.
    """

    if not tasks:
        return []

    candidates = _tiered_candidates(tasks, long_threshold_ms, overrides)
    short_pool = [task for task in candidates if _duration(task) <= long_threshold_ms]
    long_pool = [task for task in candidates if _duration(task) > long_threshold_ms]

    committed: list[Task] = []
    current = start_time
    for index, task in enumerate(short_pool):
        end = add_millis(current, _duration(task))
        if end < sleep_start or end > sleep_end:
            committed.append(task.model_copy(update={"optimality": Optimality.OPTIMAL}))
            current = end
        else:
            long_pool.append(task)
        if millis_between(current, sleep_start) < buffer_ms:
            long_pool.extend(short_pool[index + 1 :])
            break

    def _night_key(task: Task) -> tuple[int, int, int]:
        duration = _duration(task)
        ends_after_wake = add_millis(current, duration) > sleep_end
        if ends_after_wake:
            return tier_for(task, overrides), 0, duration
        return tier_for(task, overrides), 1, -duration

    long_pool.sort(key=_night_key)

    for task in long_pool:
        optimality = classify_against_sleep_window(
            task,
            current,
            sleep_start,
            sleep_end,
            buffer_ms=buffer_ms,
            long_threshold_ms=long_threshold_ms,
        )
        committed.append(task.model_copy(update={"optimality": optimality}))
        current = add_millis(current, _duration(task))

    return committed


def optimize_for_config(tasks: Sequence[Task], config: SchedulerConfig, now: datetime) -> list[Task]:
    """Run :func:`optimize_queue` from ``now`` against the configured sleep window."""

    window = config.window_for(now)
    return optimize_queue(
        tasks,
        now,
        window.start,
        window.end,
        buffer_ms=config.buffer_ms,
        long_threshold_ms=config.long_threshold_ms,
    )


def auto_optimize(
    tasks: Sequence[Task], config: SchedulerConfig, now: datetime
) -> tuple[list[Task], bool]:
    """Re-optimize when automatic optimization is enabled.

    Returns the queue to keep and whether its order changed; an unchanged order hands back the
    input tasks.
    """

    if not config.auto_optimize or not tasks:
        return list(tasks), False
    optimized = optimize_for_config(tasks, config, now)
    changed = [task.id for task in optimized] != [task.id for task in tasks]
    if not changed:
        return list(tasks), False
    return optimized, True


@dataclass(slots=True)
class QueueProjection:
    """Back-to-back completion times of a queue processed on a single lane."""

    tasks: list[Task]
    end_times: list[datetime]
    total_ms: int


def project_completion(
    tasks: Sequence[Task],
    config: SchedulerConfig,
    now: datetime,
    *,
    optimize: bool | None = None,
) -> QueueProjection:
    """Project the end time of every queued task when run one after another from ``now``."""

    use_optimizer = config.auto_optimize if optimize is None else optimize
    ordered = optimize_for_config(tasks, config, now) if use_optimizer else list(tasks)
    current = now
    end_times = []
    total = 0
    for task in ordered:
        current = add_millis(current, _duration(task))
        end_times.append(current)
        total += _duration(task)
    return QueueProjection(tasks=ordered, end_times=end_times, total_ms=total)


__all__ = [
    "optimize_queue",
    "optimize_for_config",
    "auto_optimize",
    "QueueProjection",
    "project_completion",
]
