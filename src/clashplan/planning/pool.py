"""Worker pool operations (sizing, status updates, remaining time)."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from clashplan.core.errors import WorkerPoolError
from clashplan.scenario.contract.models import Worker, WorkerStatus
from clashplan.scheduling.timeline.durations import (
    add_millis,
    millis_between,
    split_millis,
    to_millis,
)

MIN_WORKERS = 1
MAX_WORKERS = 6
DEFAULT_WORKERS = 5


def init_workers(count: int, now: datetime) -> list[Worker]:
    """Return ``count`` idle workers with ids ``1..count``."""

    return [Worker(id=index + 1, available_at=now) for index in range(count)]


def resize_worker_pool(existing: Sequence[Worker], new_count: int, now: datetime) -> list[Worker]:
    """Resize the pool, keeping the first ``min(len(existing), new_count)`` workers verbatim.

    New slots are idle, available at ``now`` and numbered by position.
    """

    if not MIN_WORKERS <= new_count <= MAX_WORKERS:
        raise WorkerPoolError(
            f"Worker count must be between {MIN_WORKERS} and {MAX_WORKERS} (got {new_count})"
        )
    resized = init_workers(new_count, now)
    for index in range(min(len(existing), new_count)):
        resized[index] = existing[index]
    return resized


def _index_of(workers: Sequence[Worker], worker_id: int) -> int:
    for index, worker in enumerate(workers):
        if worker.id == worker_id:
            return index
    raise WorkerPoolError(f"Unknown worker id {worker_id}")


def _replace(workers: Sequence[Worker], worker_id: int, **update) -> list[Worker]:
    index = _index_of(workers, worker_id)
    updated = list(workers)
    updated[index] = workers[index].model_copy(update=update)
    return updated


def set_worker_idle(workers: Sequence[Worker], worker_id: int, now: datetime) -> list[Worker]:
    return _replace(
        workers, worker_id, status=WorkerStatus.IDLE, available_at=now, current_task=None
    )


def set_worker_busy(
    workers: Sequence[Worker],
    worker_id: int,
    now: datetime,
    *,
    days: int = 0,
    hours: int = 0,
    minutes: int = 0,
    task: str | None = None,
) -> list[Worker]:
    """Mark a worker busy until ``now`` plus the remaining days/hours/minutes."""

    index = _index_of(workers, worker_id)
    label = task if task is not None else workers[index].current_task
    return _replace(
        workers,
        worker_id,
        status=WorkerStatus.BUSY,
        available_at=add_millis(now, to_millis(days, hours, minutes)),
        current_task=label,
    )


def set_worker_task(workers: Sequence[Worker], worker_id: int, task: str | None) -> list[Worker]:
    return _replace(workers, worker_id, current_task=task or None)


def refresh_workers(workers: Sequence[Worker], now: datetime) -> list[Worker]:
    """Release busy workers whose completion time has passed; idle workers move up to ``now``."""

    refreshed = []
    for worker in workers:
        if worker.status is WorkerStatus.BUSY and worker.available_at > now:
            refreshed.append(worker)
            continue
        refreshed.append(
            worker.model_copy(
                update={
                    "status": WorkerStatus.IDLE,
                    "available_at": now,
                    "current_task": None,
                }
            )
        )
    return refreshed


def remaining_time(worker: Worker, now: datetime) -> tuple[int, int, int]:
    """Days/hours/minutes until ``worker`` frees up (zeros when idle or overdue)."""

    if worker.status is WorkerStatus.IDLE or worker.available_at <= now:
        return 0, 0, 0
    return split_millis(millis_between(now, worker.available_at))


__all__ = [
    "MIN_WORKERS",
    "MAX_WORKERS",
    "DEFAULT_WORKERS",
    "init_workers",
    "resize_worker_pool",
    "set_worker_idle",
    "set_worker_busy",
    "set_worker_task",
    "refresh_workers",
    "remaining_time",
]
