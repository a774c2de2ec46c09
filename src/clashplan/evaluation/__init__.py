"""Schedule reporting helpers (DataFrames, per-worker timelines, summaries)."""

from .reporting import (
    SCHEDULE_COLUMNS,
    TimelineItem,
    group_by_worker,
    schedule_dataframe,
    schedule_summary,
    worker_timelines,
)

__all__ = [
    "SCHEDULE_COLUMNS",
    "TimelineItem",
    "schedule_dataframe",
    "group_by_worker",
    "worker_timelines",
    "schedule_summary",
]
