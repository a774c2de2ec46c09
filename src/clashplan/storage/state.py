"""Conversion between the key-value store and planner/config models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, time
from typing import Any

from pydantic import ValidationError

from clashplan.core.errors import ClashPlanValueError, StateLoadError
from clashplan.planning.pool import DEFAULT_WORKERS, MAX_WORKERS, MIN_WORKERS, resize_worker_pool
from clashplan.scenario.contract.models import PlannerState
from clashplan.scheduling.timeline.durations import parse_clock
from clashplan.scheduling.timeline.models import SchedulerConfig
from clashplan.storage.store import KeyValueStore, MemoryStore

STATE_KEY = "cocUpgradePlanner"
WORKER_COUNT_KEY = "cocBuilderCount"
SLEEP_START_KEY = "sleepStartTime"
SLEEP_END_KEY = "sleepEndTime"
AUTO_OPTIMIZE_KEY = "optimizeQueue"
SLEEP_TIME_KEY = "sleepTime"
SLEEP_DURATION_KEY = "sleepDuration"
BUFFER_MINUTES_KEY = "sleepBufferMinutes"
LONG_TASK_HOURS_KEY = "longTaskHours"

CONFIG_KEYS = (
    SLEEP_START_KEY,
    SLEEP_END_KEY,
    AUTO_OPTIMIZE_KEY,
    SLEEP_TIME_KEY,
    SLEEP_DURATION_KEY,
    BUFFER_MINUTES_KEY,
    LONG_TASK_HOURS_KEY,
)
SHARE_KEYS = (STATE_KEY,)
IMPORTABLE_KEYS = (STATE_KEY, WORKER_COUNT_KEY, *CONFIG_KEYS)


def save_state(store: KeyValueStore, state: PlannerState) -> None:
    store.set(STATE_KEY, state.model_dump(mode="json", by_alias=True))
    store.set(WORKER_COUNT_KEY, state.worker_count)


def load_state(store: KeyValueStore, now: datetime) -> PlannerState:
    """Load the planner bundle, rebuilding the pool at the stored worker count.

    Stored workers are kept up to the stored count; missing slots start idle at ``now``. An
    absent bundle yields an empty planner with the default pool.
    """

    raw = store.get(STATE_KEY)
    stored_count = store.get(WORKER_COUNT_KEY)
    try:
        state = PlannerState() if raw is None else PlannerState.model_validate(raw)
    except ValidationError as exc:
        raise StateLoadError(f"Stored planner state is invalid: {exc}") from exc
    count = state.worker_count if raw is not None else (stored_count or DEFAULT_WORKERS)
    try:
        workers = resize_worker_pool(state.workers, count, now)
    except ClashPlanValueError as exc:
        raise StateLoadError(f"Stored worker count is invalid: {exc}") from exc
    return state.model_copy(update={"workers": workers, "worker_count": count})


def _clock_text(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def save_config(store: KeyValueStore, config: SchedulerConfig) -> None:
    store.set(SLEEP_START_KEY, _clock_text(config.sleep_start))
    store.set(SLEEP_END_KEY, _clock_text(config.sleep_end))
    store.set(AUTO_OPTIMIZE_KEY, config.auto_optimize)
    store.set(SLEEP_TIME_KEY, config.sleep_time_of_day)
    store.set(SLEEP_DURATION_KEY, config.sleep_duration_hours)
    store.set(BUFFER_MINUTES_KEY, config.buffer_minutes)
    store.set(LONG_TASK_HOURS_KEY, config.long_task_hours)


def load_config(store: KeyValueStore) -> SchedulerConfig:
    """Read the sleep settings; keys that were never saved keep their defaults."""

    values: dict[str, object] = {}
    try:
        if (start := store.get(SLEEP_START_KEY)) is not None:
            values["sleep_start"] = parse_clock(str(start))
        if (end := store.get(SLEEP_END_KEY)) is not None:
            values["sleep_end"] = parse_clock(str(end))
        if (auto := store.get(AUTO_OPTIMIZE_KEY)) is not None:
            values["auto_optimize"] = auto if isinstance(auto, bool) else str(auto) == "true"
        if (sleep_time := store.get(SLEEP_TIME_KEY)) is not None:
            values["sleep_time_of_day"] = str(sleep_time)
        if (duration := store.get(SLEEP_DURATION_KEY)) is not None:
            values["sleep_duration_hours"] = duration
        if (buffer := store.get(BUFFER_MINUTES_KEY)) is not None:
            values["buffer_minutes"] = buffer
        if (long_hours := store.get(LONG_TASK_HOURS_KEY)) is not None:
            values["long_task_hours"] = long_hours
        return SchedulerConfig(**values)
    except ValueError as exc:
        raise StateLoadError(f"Stored sleep settings are invalid: {exc}") from exc


def validate_shared_values(values: Mapping[str, Any], now: datetime | None = None) -> None:
    """Raise ``StateLoadError`` unless ``values`` would load cleanly once written to a store.

    Only planner, worker-count and sleep-setting keys are accepted.
    """

    unknown = sorted(set(values) - set(IMPORTABLE_KEYS))
    if unknown:
        raise StateLoadError(f"Unexpected keys in shared data: {', '.join(unknown)}")
    count = values.get(WORKER_COUNT_KEY)
    valid_count = isinstance(count, int) and not isinstance(count, bool)
    if count is not None and not (valid_count and MIN_WORKERS <= count <= MAX_WORKERS):
        raise StateLoadError(f"Stored worker count is invalid: {count!r}")
    scratch = MemoryStore(dict(values))
    load_state(scratch, now or datetime.now())
    load_config(scratch)


__all__ = [
    "STATE_KEY",
    "WORKER_COUNT_KEY",
    "SLEEP_START_KEY",
    "SLEEP_END_KEY",
    "AUTO_OPTIMIZE_KEY",
    "SLEEP_TIME_KEY",
    "SLEEP_DURATION_KEY",
    "BUFFER_MINUTES_KEY",
    "LONG_TASK_HOURS_KEY",
    "CONFIG_KEYS",
    "SHARE_KEYS",
    "IMPORTABLE_KEYS",
    "save_state",
    "load_state",
    "save_config",
    "load_config",
    "validate_shared_values",
]
