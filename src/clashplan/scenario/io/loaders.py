"""Task-queue loading utilities (YAML plan files and CSV task tables)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Any, cast

import pandas as pd
import yaml
from pydantic import ValidationError

from clashplan.core.errors import TaskValidationError
from clashplan.planning.queue import TaskForm, add_tasks
from clashplan.scenario.contract.models import Task
from clashplan.scheduling.timeline.durations import parse_build_time, parse_clock, split_millis
from clashplan.scheduling.timeline.models import SchedulerConfig

__all__ = ["PlanInput", "read_csv", "read_yaml", "load_task_rows", "load_task_queue", "load_plan"]

_TASK_COLUMNS = ("name", "category", "days", "hours", "minutes", "priority", "quantity")


@dataclass(slots=True)
class PlanInput:
    """Contents of a plan file: tasks plus optional pool size and sleep settings."""

    tasks: list[Task]
    worker_count: int | None = None
    config: SchedulerConfig = field(default_factory=SchedulerConfig)


def read_csv(path: Path) -> pd.DataFrame:
    """Load a CSV file using pandas with UTF-8 defaults."""
    try:
        return pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise TaskValidationError(f"{path}: could not read CSV: {exc}") from exc


def read_yaml(path: Path) -> Any:
    """Parse a YAML file; an empty document yields an empty mapping."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise TaskValidationError(f"{path}: could not parse YAML: {exc}") from exc


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return bool(pd.isna(cast("Any", value)))


def _normalise_row(row: Mapping[str, object]) -> dict[str, object]:
    """Drop blanks, expand a ``duration`` string into days/hours/minutes."""

    cleaned = {key: value for key, value in row.items() if not _is_blank(value)}
    duration = cleaned.pop("duration", None)
    if duration is not None:
        days, hours, minutes = split_millis(parse_build_time(str(duration)))
        cleaned.setdefault("days", days)
        cleaned.setdefault("hours", hours)
        cleaned.setdefault("minutes", minutes)
    for key in ("category", "priority"):
        if key in cleaned:
            cleaned[key] = str(cleaned[key]).strip().lower()
    for key in ("days", "hours", "minutes", "quantity"):
        if key in cleaned:
            cleaned[key] = int(cast("Any", cleaned[key]))
    return {key: value for key, value in cleaned.items() if key in _TASK_COLUMNS}


def _build_tasks(rows: Sequence[Mapping[str, object]], source: Path, now_ms: int | None) -> list[Task]:
    if not isinstance(rows, list):
        raise TaskValidationError(f"{source}: 'tasks' must be a list")
    tasks: list[Task] = []
    for line_no, row in enumerate(rows, start=1):
        if not isinstance(row, Mapping):
            raise TaskValidationError(f"{source}: task #{line_no} must be a mapping of fields")
        try:
            form = TaskForm(**_normalise_row(row))
            tasks.extend(add_tasks(form, tasks, now_ms=now_ms))
        except (ValidationError, ValueError) as exc:
            raise TaskValidationError(f"{source}: task #{line_no} is invalid: {exc}") from exc
    return tasks


def load_task_rows(path: str | Path) -> list[dict[str, object]]:
    """Return raw task rows from a ``.csv`` table or a YAML file with a ``tasks`` list."""

    source = Path(path)
    if source.suffix.lower() == ".csv":
        frame = read_csv(source)
        return cast("list[dict[str, object]]", frame.to_dict(orient="records"))
    meta = read_yaml(source)
    rows = meta.get("tasks", []) if isinstance(meta, dict) else meta
    if not isinstance(rows, list):
        raise TaskValidationError(f"{source}: 'tasks' must be a list")
    return rows


def load_task_queue(path: str | Path, *, now_ms: int | None = None) -> list[Task]:
    """Load task definitions and expand batches (``quantity``) into individual tasks.

    Rows accept either ``days``/``hours``/``minutes`` columns or a ``duration`` string such as
    ``"1d 4h"``.
    """

    source = Path(path)
    return _build_tasks(load_task_rows(source), source, now_ms)


_SLEEP_ALIASES = {
    "start": "sleep_start",
    "end": "sleep_end",
    "time_of_day": "sleep_time_of_day",
    "duration_hours": "sleep_duration_hours",
}
_CLOCK_FIELDS = ("sleep_start", "sleep_end", "sleep_time_of_day")


def _as_clock(value: object) -> time:
    # YAML 1.1 reads an unquoted 22:00 as the sexagesimal integer 1320
    if isinstance(value, time):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return time((value // 60) % 24, value % 60)
    return parse_clock(str(value))


def _sleep_config(sleep: Mapping[str, object]) -> SchedulerConfig:
    values = {_SLEEP_ALIASES.get(key, key): value for key, value in sleep.items()}
    for key in _CLOCK_FIELDS:
        if key in values:
            values[key] = _as_clock(values[key])
    if "sleep_time_of_day" in values:
        moment = cast(time, values["sleep_time_of_day"])
        values["sleep_time_of_day"] = f"{moment.hour:02d}:{moment.minute:02d}"
    return SchedulerConfig(**values)


def load_plan(path: str | Path, *, now_ms: int | None = None) -> PlanInput:
    """Load a YAML plan file.

    Recognised sections: ``tasks`` (list of task rows), ``workers`` (pool size) and ``sleep``
    (``start``, ``end``, ``auto_optimize``, ``time_of_day``, ``duration_hours``,
    ``buffer_minutes``).
    """

    source = Path(path).resolve()
    meta = read_yaml(source)
    if not isinstance(meta, dict):
        raise TaskValidationError(f"{source}: a plan file must be a mapping of sections")
    tasks = _build_tasks(meta.get("tasks", []), source, now_ms)
    sleep = meta.get("sleep") or {}
    if not isinstance(sleep, Mapping):
        raise TaskValidationError(f"{source}: 'sleep' must be a mapping of settings")
    try:
        config = _sleep_config(sleep)
    except (TypeError, ValueError) as exc:
        raise TaskValidationError(f"{source}: invalid sleep settings: {exc}") from exc
    worker_count = meta.get("workers")
    if worker_count is not None:
        try:
            worker_count = int(worker_count)
        except (TypeError, ValueError) as exc:
            raise TaskValidationError(f"{source}: 'workers' must be a whole number") from exc
    return PlanInput(
        tasks=tasks,
        worker_count=worker_count,
        config=config,
    )
