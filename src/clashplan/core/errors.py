"""Common clashplan-specific exceptions."""


class ClashPlanValueError(ValueError):
    """Raised when clashplan detects invalid user-provided data."""


class TaskValidationError(ClashPlanValueError):
    """Raised when a task form or task edit is rejected."""


class WorkerPoolError(ClashPlanValueError):
    """Raised for pool sizes outside the supported range or unknown workers."""


class NoWorkersError(ClashPlanValueError):
    """Raised when a schedule is requested without any worker."""


class EmptyQueueError(ClashPlanValueError):
    """Raised when a schedule is requested for an empty task queue."""


class StateLoadError(ClashPlanValueError):
    """Raised when a persisted planner bundle cannot be validated."""


__all__ = [
    "ClashPlanValueError",
    "TaskValidationError",
    "WorkerPoolError",
    "NoWorkersError",
    "EmptyQueueError",
    "StateLoadError",
]
