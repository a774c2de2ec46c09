"""Per-worker "current task" selection shown on the schedule view."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from clashplan.scenario.contract.models import ScheduleEntry, Worker


def toggle_schedule_selection(
    selected: Mapping[str, int],
    first_indices: Mapping[str, int],
    worker_id: int,
    task_id: int,
    task_index: int,
) -> tuple[dict[str, int], dict[str, int]]:
    """Select ``task_id`` for ``worker_id``, or clear the selection if it was already selected.

    Keys are stringified worker ids, matching the persisted bundle.
    """

    key = str(worker_id)
    new_selected = dict(selected)
    new_indices = dict(first_indices)
    if new_selected.get(key) == task_id:
        new_selected.pop(key, None)
        new_indices.pop(key, None)
    else:
        new_selected[key] = task_id
        new_indices[key] = task_index
    return new_selected, new_indices


def worker_display_name(
    worker_id: int,
    entries: Sequence[ScheduleEntry],
    workers: Sequence[Worker],
    selected: Mapping[str, int],
) -> str:
    """Worker label suffixed with the selected task, else with the worker's current task."""

    own = [entry for entry in entries if entry.worker_id == worker_id]
    worker = next((w for w in workers if w.id == worker_id), None)
    if own:
        base = own[0].worker_name
    elif worker is not None:
        base = worker.name
    else:
        base = f"Builder {worker_id}"
    chosen = selected.get(str(worker_id))
    if chosen is not None:
        match = next((entry for entry in own if entry.task_id == chosen), None)
        if match is not None:
            return f"{base} - {match.task_name}"
    if worker is not None and worker.current_task:
        return f"{base} - {worker.current_task}"
    return base


__all__ = ["toggle_schedule_selection", "worker_display_name"]
