"""Worker pool and task queue operations.

Every helper takes the current lists and returns new ones so callers can persist the result
after the call returns.
"""

from clashplan.planning.pool import (
    DEFAULT_WORKERS,
    MAX_WORKERS,
    MIN_WORKERS,
    init_workers,
    refresh_workers,
    remaining_time,
    resize_worker_pool,
    set_worker_busy,
    set_worker_idle,
    set_worker_task,
)
from clashplan.planning.queue import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    TaskForm,
    TaskGroup,
    add_tasks,
    change_priority,
    clear_tasks,
    group_tasks,
    next_task_id,
    remove_batch,
    remove_task,
    rename_task,
    sort_by_priority,
)

__all__ = [
    "DEFAULT_WORKERS",
    "MIN_WORKERS",
    "MAX_WORKERS",
    "init_workers",
    "resize_worker_pool",
    "set_worker_idle",
    "set_worker_busy",
    "set_worker_task",
    "refresh_workers",
    "remaining_time",
    "MIN_QUANTITY",
    "MAX_QUANTITY",
    "TaskForm",
    "TaskGroup",
    "next_task_id",
    "add_tasks",
    "remove_task",
    "remove_batch",
    "clear_tasks",
    "change_priority",
    "rename_task",
    "sort_by_priority",
    "group_tasks",
]
