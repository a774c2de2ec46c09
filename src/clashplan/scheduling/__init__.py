"""Scheduling primitives: sleep windows, configuration and duration helpers."""

from .timeline import SchedulerConfig, SleepWindow

__all__ = ["SchedulerConfig", "SleepWindow"]
