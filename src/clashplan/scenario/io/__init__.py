"""Task queue and plan file loaders."""

from .loaders import PlanInput, load_plan, load_task_queue, load_task_rows, read_csv, read_yaml

__all__ = ["PlanInput", "load_plan", "load_task_queue", "load_task_rows", "read_csv", "read_yaml"]
