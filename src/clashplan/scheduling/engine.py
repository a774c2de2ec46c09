"""Assignment engine: earliest-available-worker simulation over an ordered task list."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from clashplan.core.errors import EmptyQueueError, NoWorkersError
from clashplan.optimization.classifier import is_start_time_good_for_sleep_schedule
from clashplan.optimization.optimizer import optimize_for_config
from clashplan.scenario.contract.models import ScheduleEntry, Task, Worker, WorkerStatus
from clashplan.scheduling.timeline.durations import add_millis
from clashplan.scheduling.timeline.models import SchedulerConfig


@dataclass(slots=True)
class ScheduleRun:
    """Result of a schedule generation.

    Attributes
    ----------
    entries:
        One entry per task, in assignment order. This is the authoritative schedule.
    workers:
        Simulated copies of the pool after every task was assigned; the caller's workers are
        never modified.
    tasks:
        The task order that was fed to the engine (optimizer output or the raw queue).
    """

    entries: list[ScheduleEntry]
    workers: list[Worker]
    tasks: list[Task]


def _check_inputs(tasks: Sequence[Task], workers: Sequence[Worker]) -> None:
    if not tasks:
        raise EmptyQueueError("Add tasks to the queue first")
    if not workers:
        raise NoWorkersError("At least one worker is required to build a schedule")


def generate_schedule(
    ordered_tasks: Sequence[Task],
    workers: Sequence[Worker],
    *,
    sleep_hour: int,
) -> ScheduleRun:
    """Assign each task, in order, to the worker that frees up first.

    Ties on ``available_at`` go to the lowest worker id. Each entry's ``is_good_time`` comes from
    :func:`is_start_time_good_for_sleep_schedule` with the entry's start hour and ``sleep_hour``.
    """

    _check_inputs(ordered_tasks, workers)
    pool = [worker.model_copy() for worker in workers]
    entries: list[ScheduleEntry] = []
    for task in ordered_tasks:
        index = min(range(len(pool)), key=lambda i: (pool[i].available_at, pool[i].id))
        worker = pool[index]
        start = worker.available_at
        end = add_millis(start, task.duration_ms)
        pool[index] = worker.model_copy(
            update={
                "status": WorkerStatus.BUSY,
                "available_at": end,
                "current_task": task.base_name,
            }
        )
        entries.append(
            ScheduleEntry(
                task_id=task.id,
                task_name=task.base_name,
                task_category=task.category,
                worker_id=worker.id,
                worker_name=worker.name,
                start_time=start,
                end_time=end,
                duration_ms=task.duration_ms,
                is_good_time=is_start_time_good_for_sleep_schedule(
                    task.duration_ms, start.hour, sleep_hour
                ),
            )
        )
    return ScheduleRun(entries=entries, workers=pool, tasks=list(ordered_tasks))


def plan_schedule(
    tasks: Sequence[Task],
    workers: Sequence[Worker],
    config: SchedulerConfig,
    now: datetime,
) -> ScheduleRun:
    """Generate a schedule, running the optimizer first when ``config.auto_optimize`` is set."""

    _check_inputs(tasks, workers)
    ordered = optimize_for_config(tasks, config, now) if config.auto_optimize else list(tasks)
    return generate_schedule(ordered, workers, sleep_hour=config.sleep_hour)


__all__ = ["ScheduleRun", "generate_schedule", "plan_schedule"]
