"""Core utilities shared across clashplan modules."""

from .errors import (
    ClashPlanValueError,
    EmptyQueueError,
    NoWorkersError,
    StateLoadError,
    TaskValidationError,
    WorkerPoolError,
)

__all__ = [
    "ClashPlanValueError",
    "TaskValidationError",
    "WorkerPoolError",
    "NoWorkersError",
    "EmptyQueueError",
    "StateLoadError",
]
