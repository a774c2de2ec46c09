"""Scenario contract models (Pydantic schemas, validators)."""

from .models import (
    Category,
    Optimality,
    PlannerState,
    Priority,
    ScheduleEntry,
    Task,
    Worker,
    WorkerStatus,
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
