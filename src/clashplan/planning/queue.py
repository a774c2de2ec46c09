"""Task queue operations: batch creation, edits, removal and grouping."""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel, field_validator

from clashplan.core.errors import TaskValidationError
from clashplan.scenario.contract.models import Category, Priority, Task
from clashplan.scheduling.timeline.durations import to_millis

MIN_QUANTITY = 1
MAX_QUANTITY = 100

_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class TaskForm(BaseModel):
    """Submitted "add task" form; one submission may request a batch of identical tasks."""

    name: str
    category: Category = Category.DEFENSE
    days: int = 0
    hours: int = 0
    minutes: int = 0
    priority: Priority = Priority.MEDIUM
    quantity: int = 1

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()

    @property
    def duration_ms(self) -> int:
        return to_millis(self.days, self.hours, self.minutes)


@dataclass(slots=True)
class TaskGroup:
    """Batch members sharing base name, category and duration."""

    base_name: str
    category: Category
    duration_ms: int
    priority: Priority
    task_ids: list[int]

    @property
    def count(self) -> int:
        return len(self.task_ids)


def next_task_id(existing: Iterable[Task], now_ms: int | None = None) -> int:
    """Time-based id, bumped past every id already in ``existing``."""

    candidate = now_ms if now_ms is not None else int(time.time() * 1000)
    highest = max((task.id for task in existing), default=0)
    return max(candidate, highest + 1)


def add_tasks(form: TaskForm, existing: Sequence[Task] = (), *, now_ms: int | None = None) -> list[Task]:
    """Build the tasks requested by ``form``.

    Returns only the new tasks; batch members get ``" (i/q)"`` name suffixes and share every other
    attribute.
    """

    if not form.name:
        raise TaskValidationError("Task name must not be empty")
    if form.duration_ms <= 0:
        raise TaskValidationError("Task duration must be greater than zero")
    if not MIN_QUANTITY <= form.quantity <= MAX_QUANTITY:
        raise TaskValidationError(
            f"Quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY} (got {form.quantity})"
        )
    first_id = next_task_id(existing, now_ms)
    tasks = []
    for index in range(form.quantity):
        name = form.name
        if form.quantity > 1:
            name = f"{form.name} ({index + 1}/{form.quantity})"
        tasks.append(
            Task(
                id=first_id + index,
                name=name,
                base_name=form.name,
                category=form.category,
                duration_ms=form.duration_ms,
                priority=form.priority,
            )
        )
    return tasks


def _require(tasks: Sequence[Task], task_id: int) -> int:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    raise TaskValidationError(f"Unknown task id {task_id}")


def remove_task(tasks: Sequence[Task], task_id: int) -> list[Task]:
    _require(tasks, task_id)
    return [task for task in tasks if task.id != task_id]


def _in_group(task: Task, base_name: str, category: Category, duration_ms: int) -> bool:
    return (
        task.base_name == base_name
        and task.category == category
        and task.duration_ms == duration_ms
    )


def remove_batch(
    tasks: Sequence[Task],
    base_name: str,
    category: Category,
    duration_ms: int,
    *,
    all_members: bool = True,
) -> list[Task]:
    """Remove every member of a batch group, or only its first member."""

    if all_members:
        return [task for task in tasks if not _in_group(task, base_name, category, duration_ms)]
    remaining = list(tasks)
    for index, task in enumerate(remaining):
        if _in_group(task, base_name, category, duration_ms):
            del remaining[index]
            break
    return remaining


def clear_tasks() -> list[Task]:
    return []


def change_priority(tasks: Sequence[Task], task_id: int, priority: Priority) -> list[Task]:
    index = _require(tasks, task_id)
    updated = list(tasks)
    updated[index] = tasks[index].model_copy(update={"priority": priority})
    return updated


def rename_task(tasks: Sequence[Task], task_id: int, name: str) -> list[Task]:
    """Relabel a task; the duration is left untouched.

    The new name also becomes the task's ``base_name``, so a renamed batch member leaves its
    group and no longer carries the `` (i/q)`` suffix.
    """

    name = name.strip()
    if not name:
        raise TaskValidationError("Task name must not be empty")
    index = _require(tasks, task_id)
    updated = list(tasks)
    updated[index] = tasks[index].model_copy(update={"name": name, "base_name": name})
    return updated


def sort_by_priority(tasks: Sequence[Task]) -> list[Task]:
    """Stable sort, high priority first."""

    return sorted(tasks, key=lambda task: _PRIORITY_RANK[task.priority])


def group_tasks(tasks: Sequence[Task]) -> list[TaskGroup]:
    """Collapse batch members into groups, in first-seen order."""

    groups: dict[tuple[str, Category, int], TaskGroup] = {}
    for task in tasks:
        key = (task.base_name, task.category, task.duration_ms)
        group = groups.get(key)
        if group is None:
            groups[key] = TaskGroup(
                base_name=task.base_name,
                category=task.category,
                duration_ms=task.duration_ms,
                priority=task.priority,
                task_ids=[task.id],
            )
        else:
            group.task_ids.append(task.id)
    return list(groups.values())


__all__ = [
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
