"""Pydantic models describing workers, queued tasks and schedule entries."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clashplan.scheduling.timeline.durations import format_duration_short, split_millis


class Category(str, Enum):
    DEFENSE = "defense"
    RESOURCE = "resource"
    ARMY = "army"
    WALL = "wall"
    OTHER = "other"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WorkerStatus(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


class Optimality(str, Enum):
    OPTIMAL = "Optimal"
    SUBOPTIMAL = "Suboptimal"


class Worker(BaseModel):
    """A builder slot processing one task at a time.

    Attributes
    ----------
    id:
        Stable one-indexed identity assigned when the pool is sized.
    name:
        Display label (``"Builder <id>"`` by default).
    status:
        ``idle`` or ``busy``.
    available_at:
        When idle, "now" or earlier; when busy, the projected completion of the current task.
    current_task:
        Optional label of the active task; display only.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    status: WorkerStatus = WorkerStatus.IDLE
    available_at: datetime
    current_task: str | None = None

    @field_validator("id")
    @classmethod
    def _id_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Worker.id must be >= 1")
        return value

    @model_validator(mode="after")
    def _default_name(self) -> Worker:
        if not self.name:
            object.__setattr__(self, "name", f"Builder {self.id}")
        return self


class Task(BaseModel):
    """A queued upgrade job.

    ``duration_ms`` never changes after creation; edits go through ``model_copy`` and only touch
    labels or priority. ``base_name`` is the name without any ``" (i/N)"`` batch suffix.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    base_name: str = ""
    category: Category = Category.OTHER
    duration_ms: int
    priority: Priority = Priority.MEDIUM
    optimality: Optimality | None = None

    @field_validator("duration_ms")
    @classmethod
    def _duration_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Task.duration_ms must be non-negative")
        return value

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Task.name must be non-empty")
        return value.strip()

    @model_validator(mode="after")
    def _default_base_name(self) -> Task:
        if not self.base_name:
            object.__setattr__(self, "base_name", self.name)
        return self

    @property
    def duration(self) -> timedelta:
        return timedelta(milliseconds=self.duration_ms)

    @property
    def duration_text(self) -> str:
        return format_duration_short(*split_millis(self.duration_ms))


class ScheduleEntry(BaseModel):
    """One task placed on one worker's timeline."""

    model_config = ConfigDict(frozen=True)

    task_id: int
    task_name: str
    task_category: Category
    worker_id: int
    worker_name: str
    start_time: datetime
    end_time: datetime
    duration_ms: int
    is_good_time: bool

    @property
    def duration_text(self) -> str:
        return format_duration_short(*split_millis(self.duration_ms))


class PlannerState(BaseModel):
    """Persisted planner bundle (workers, queue, last schedule and selection state)."""

    model_config = ConfigDict(populate_by_name=True)

    workers: list[Worker] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    schedule: list[ScheduleEntry] = Field(default_factory=list)
    worker_count: int = Field(default=5, alias="workerCount")
    selected_schedule_tasks: dict[str, int] = Field(
        default_factory=dict, alias="selectedScheduleTasks"
    )
    first_checked_task_indices: dict[str, int] = Field(
        default_factory=dict, alias="firstCheckedTaskIndices"
    )


__all__ = [
    "Category",
    "Priority",
    "WorkerStatus",
    "Optimality",
    "Worker",
    "Task",
    "ScheduleEntry",
    "PlannerState",
]
