"""Upgrade queue commands."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from clashplan.cli._state import session
from clashplan.cli._utils import (
    CATEGORY_CHOICE,
    PRIORITY_CHOICE,
    console,
    fail,
    groups_table,
    tasks_table,
)
from clashplan.core.errors import ClashPlanValueError
from clashplan.planning.queue import (
    MAX_QUANTITY,
    TaskForm,
    add_tasks,
    change_priority,
    clear_tasks,
    next_task_id,
    remove_batch,
    remove_task,
    rename_task,
    sort_by_priority,
)
from clashplan.scenario.contract.models import Priority
from clashplan.scenario.io import load_task_queue
from clashplan.scheduling.timeline.durations import parse_build_time, split_millis

tasks_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Manage the upgrade queue.")


def now_millis(ctx: typer.Context) -> int:
    return int(session(ctx).now.timestamp() * 1000)


@tasks_app.command("add")
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Upgrade name, e.g. 'Archer Tower'."),
    category: str = typer.Option("defense", "--category", "-c", click_type=CATEGORY_CHOICE),
    days: int = typer.Option(0, "--days", min=0),
    hours: int = typer.Option(0, "--hours", min=0),
    minutes: int = typer.Option(0, "--minutes", min=0),
    duration: str | None = typer.Option(
        None, "--duration", help="Duration text such as '1d 4h 30m' (overrides --days/--hours/--minutes)."
    ),
    priority: str = typer.Option("medium", "--priority", "-p", click_type=PRIORITY_CHOICE),
    quantity: int = typer.Option(1, "--quantity", "-q", help=f"Copies to queue (1-{MAX_QUANTITY})."),
) -> None:
    """Queue one upgrade, or a numbered batch of identical upgrades."""
    current = session(ctx)
    state, config = current.load()
    if duration is not None:
        days, hours, minutes = split_millis(parse_build_time(duration))
    try:
        form = TaskForm(
            name=name,
            category=category.lower(),
            days=days,
            hours=hours,
            minutes=minutes,
            priority=priority.lower(),
            quantity=quantity,
        )
        added = add_tasks(form, state.tasks, now_ms=now_millis(ctx))
    except (ValidationError, ClashPlanValueError) as exc:
        fail(str(exc))
    current.commit_tasks(state, config, [*state.tasks, *added])
    console.print(f"Queued {quantity} x {form.name}.")


@tasks_app.command("list")
def list_tasks(
    ctx: typer.Context,
    grouped: bool = typer.Option(False, "--grouped", help="Collapse batches into one row."),
) -> None:
    """Show the upgrade queue in its current order."""
    state, _ = session(ctx).load()
    if not state.tasks:
        console.print("Upgrade queue is empty.")
        return
    console.print(groups_table(state.tasks) if grouped else tasks_table(state.tasks))


@tasks_app.command("remove")
def remove(ctx: typer.Context, task_id: int = typer.Argument(..., help="Task id.")) -> None:
    """Remove a single task from the queue."""
    current = session(ctx)
    state, _ = current.load()
    try:
        tasks = remove_task(state.tasks, task_id)
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.save(state.model_copy(update={"tasks": tasks}))
    console.print(f"Removed task {task_id}.")


@tasks_app.command("remove-group")
def remove_group(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Id of any task in the batch."),
    one: bool = typer.Option(False, "--one", help="Remove only the first member of the batch."),
) -> None:
    """Remove the batch a task belongs to."""
    current = session(ctx)
    state, _ = current.load()
    member = next((task for task in state.tasks if task.id == task_id), None)
    if member is None:
        fail(f"Unknown task id {task_id}")
    tasks = remove_batch(
        state.tasks, member.base_name, member.category, member.duration_ms, all_members=not one
    )
    current.save(state.model_copy(update={"tasks": tasks}))
    console.print(f"Removed {len(state.tasks) - len(tasks)} task(s) from '{member.base_name}'.")


@tasks_app.command("priority")
def priority_cmd(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id."),
    priority: str = typer.Argument(..., click_type=PRIORITY_CHOICE),
) -> None:
    """Change a task's priority."""
    current = session(ctx)
    state, config = current.load()
    try:
        tasks = change_priority(state.tasks, task_id, Priority(priority.lower()))
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.commit_tasks(state, config, tasks)
    console.print(f"Task {task_id} priority set to {priority.lower()}.")


@tasks_app.command("rename")
def rename(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id."),
    name: str = typer.Argument(..., help="New name."),
) -> None:
    """Rename a task; its duration is unchanged and a renamed batch member leaves its batch."""
    current = session(ctx)
    state, _ = current.load()
    try:
        tasks = rename_task(state.tasks, task_id, name)
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.save(state.model_copy(update={"tasks": tasks}))
    console.print(f"Task {task_id} renamed.")


@tasks_app.command("sort")
def sort(ctx: typer.Context) -> None:
    """Reorder the queue by priority, high first (ties keep their order)."""
    current = session(ctx)
    state, _ = current.load()
    tasks = sort_by_priority(state.tasks)
    current.save(state.model_copy(update={"tasks": tasks}))
    console.print(tasks_table(tasks))


@tasks_app.command("clear")
def clear(ctx: typer.Context) -> None:
    """Empty the queue."""
    current = session(ctx)
    state, _ = current.load()
    current.save(state.model_copy(update={"tasks": clear_tasks()}))
    console.print("Upgrade queue cleared.")


@tasks_app.command("import")
def import_tasks(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML or CSV task file."),
    replace: bool = typer.Option(False, "--replace", help="Replace the queue instead of appending."),
) -> None:
    """Append tasks from a YAML (``tasks:`` list) or CSV file."""
    current = session(ctx)
    state, config = current.load()
    existing = [] if replace else list(state.tasks)
    try:
        loaded = load_task_queue(path)
    except (OSError, ClashPlanValueError) as exc:
        fail(str(exc))
    first_id = next_task_id(existing, now_millis(ctx))
    imported = [task.model_copy(update={"id": first_id + offset}) for offset, task in enumerate(loaded)]
    current.commit_tasks(state, config, existing + imported)
    console.print(f"Imported {len(imported)} task(s) from {path}.")
