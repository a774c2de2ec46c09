"""Tabular and timeline views of generated schedules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import pandas as pd

from clashplan.scenario.contract.models import ScheduleEntry
from clashplan.scheduling.timeline.durations import format_absolute_time

__all__ = [
    "SCHEDULE_COLUMNS",
    "TimelineItem",
    "schedule_dataframe",
    "group_by_worker",
    "worker_timelines",
    "schedule_summary",
]

SCHEDULE_COLUMNS = [
    "task_id",
    "task_name",
    "task_category",
    "worker_id",
    "worker_name",
    "start_time",
    "end_time",
    "duration_ms",
    "duration_text",
    "is_good_time",
]


@dataclass(slots=True)
class TimelineItem:
    """A schedule entry positioned on its worker's timeline.

    ``stage`` is ``"active"`` for the first item, ``"last"`` for the final one and
    ``"queued"`` otherwise.
    """

    entry: ScheduleEntry
    stage: str

    @property
    def start_label(self) -> str:
        return format_absolute_time(self.entry.start_time)

    @property
    def end_label(self) -> str:
        return format_absolute_time(self.entry.end_time)


def schedule_dataframe(entries: Sequence[ScheduleEntry]) -> pd.DataFrame:
    """Return one row per schedule entry with the columns in :data:`SCHEDULE_COLUMNS`."""

    rows = []
    for entry in entries:
        row = entry.model_dump()
        row["task_category"] = entry.task_category.value
        row["duration_text"] = entry.duration_text
        rows.append(row)
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def group_by_worker(entries: Sequence[ScheduleEntry]) -> dict[int, list[ScheduleEntry]]:
    """Entries keyed by worker id, in first-seen worker order."""

    grouped: dict[int, list[ScheduleEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.worker_id, []).append(entry)
    return grouped


def worker_timelines(entries: Sequence[ScheduleEntry]) -> dict[int, list[TimelineItem]]:
    timelines: dict[int, list[TimelineItem]] = {}
    for worker_id, items in group_by_worker(entries).items():
        total = len(items)
        staged = []
        for index, entry in enumerate(items):
            if index == 0:
                stage = "active"
            elif index == total - 1:
                stage = "last"
            else:
                stage = "queued"
            staged.append(TimelineItem(entry=entry, stage=stage))
        timelines[worker_id] = staged
    return timelines


def schedule_summary(entries: Sequence[ScheduleEntry]) -> dict[str, object]:
    """Headline numbers for a schedule (task counts, finish time, per-worker load)."""

    if not entries:
        return {
            "tasks": 0,
            "good_time_tasks": 0,
            "suboptimal_time_tasks": 0,
            "first_start": None,
            "finish_time": None,
            "busy_ms_by_worker": {},
        }
    first_start: datetime = min(entry.start_time for entry in entries)
    finish: datetime = max(entry.end_time for entry in entries)
    good = sum(1 for entry in entries if entry.is_good_time)
    busy: dict[int, int] = {}
    for entry in entries:
        busy[entry.worker_id] = busy.get(entry.worker_id, 0) + entry.duration_ms
    return {
        "tasks": len(entries),
        "good_time_tasks": good,
        "suboptimal_time_tasks": len(entries) - good,
        "first_start": first_start.isoformat(timespec="minutes"),
        "finish_time": finish.isoformat(timespec="minutes"),
        "busy_ms_by_worker": busy,
    }
