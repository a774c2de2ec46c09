"""CLI helper utilities for clashplan."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import NoReturn

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clashplan.optimization.tiers import tier_for
from clashplan.planning.pool import remaining_time
from clashplan.planning.queue import group_tasks
from clashplan.scenario.contract.models import (
    Category,
    Optimality,
    Priority,
    Task,
    Worker,
    WorkerStatus,
)
from clashplan.scheduling.timeline.durations import (
    format_absolute_time,
    format_duration_short,
)

console = Console()

CATEGORY_CHOICE = click.Choice([category.value for category in Category], case_sensitive=False)
PRIORITY_CHOICE = click.Choice([priority.value for priority in Priority], case_sensitive=False)

_PRIORITY_STYLE = {Priority.HIGH: "red", Priority.MEDIUM: "yellow", Priority.LOW: "green"}


def fail(message: str) -> NoReturn:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def parse_now(value: str | None) -> datetime:
    """Parse an ISO timestamp override; ``None`` means the local wall clock."""

    if value is None:
        return datetime.now().replace(second=0, microsecond=0)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Expected YYYY-MM-DDTHH:MM, got {value!r}") from exc
    return parsed.replace(tzinfo=None)


def workers_table(workers: Sequence[Worker], now: datetime) -> Table:
    table = Table(title="Builders")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Free at")
    table.add_column("Remaining")
    table.add_column("Current task")
    for worker in workers:
        busy = worker.status is WorkerStatus.BUSY
        table.add_row(
            str(worker.id),
            worker.name,
            "[yellow]busy[/yellow]" if busy else "[green]idle[/green]",
            format_absolute_time(worker.available_at),
            format_duration_short(*remaining_time(worker, now)) if busy else "-",
            escape(worker.current_task or "-"),
        )
    return table


def _optimality_cell(value: Optimality | None) -> str:
    if value is None:
        return "-"
    colour = "green" if value is Optimality.OPTIMAL else "magenta"
    return f"[{colour}]{value.value}[/{colour}]"


def tasks_table(tasks: Sequence[Task], *, title: str = "Upgrade queue") -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Duration")
    table.add_column("Priority")
    table.add_column("Tier", justify="right")
    table.add_column("Sleep fit")
    for position, task in enumerate(tasks, start=1):
        style = _PRIORITY_STYLE[task.priority]
        table.add_row(
            str(position),
            str(task.id),
            escape(task.name),
            task.category.value,
            task.duration_text,
            f"[{style}]{task.priority.value}[/{style}]",
            str(int(tier_for(task))),
            _optimality_cell(task.optimality),
        )
    return table


def groups_table(tasks: Sequence[Task]) -> Table:
    table = Table(title="Upgrade queue (grouped)")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Duration")
    table.add_column("Priority")
    table.add_column("Count", justify="right")
    table.add_column("Task IDs")
    for group in group_tasks(tasks):
        sample = next(task for task in tasks if task.id == group.task_ids[0])
        table.add_row(
            escape(group.base_name),
            group.category.value,
            sample.duration_text,
            group.priority.value,
            str(group.count),
            ", ".join(str(task_id) for task_id in group.task_ids),
        )
    return table


__all__ = [
    "console",
    "CATEGORY_CHOICE",
    "PRIORITY_CHOICE",
    "fail",
    "parse_now",
    "workers_table",
    "tasks_table",
    "groups_table",
]
