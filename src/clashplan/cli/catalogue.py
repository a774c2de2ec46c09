"""Building catalogue commands."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from clashplan.cli._state import session
from clashplan.cli._utils import CATEGORY_CHOICE, console, fail
from clashplan.planning.queue import next_task_id
from clashplan.reference import levels_for_town_hall, load_catalogue, lookup, task_from_reference
from clashplan.scenario.contract.models import Category
from clashplan.scheduling.timeline.durations import format_duration

ref_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Browse the bundled building catalogue."
)


@ref_app.command("list")
def list_levels(
    town_hall: Annotated[
        int | None,
        typer.Option("--town-hall", "-t", min=1, help="Only levels unlocked at this town hall."),
    ] = None,
    category: Annotated[
        str | None, typer.Option("--category", "-c", click_type=CATEGORY_CHOICE)
    ] = None,
) -> None:
    """List catalogue levels with their build times."""
    wanted = Category(category.lower()) if category else None
    if town_hall is None:
        entries = [e for e in load_catalogue() if wanted is None or e.category == wanted]
    else:
        entries = levels_for_town_hall(town_hall, wanted)
    table = Table(title="Building catalogue")
    table.add_column("Building")
    table.add_column("Level", justify="right")
    table.add_column("Category")
    table.add_column("Build time")
    table.add_column("Town hall", justify="right")
    for entry in entries:
        table.add_row(
            entry.display_name,
            str(entry.level),
            entry.category.value,
            format_duration(entry.duration_ms),
            str(entry.town_hall),
        )
    console.print(table)


@ref_app.command("add")
def add_from_catalogue(
    ctx: typer.Context,
    building: Annotated[str, typer.Argument(help="Building type, e.g. 'Gold Mine'.")],
    level: Annotated[int, typer.Argument(help="Target level.")],
) -> None:
    """Queue the upgrade to ``level`` of ``building`` using the catalogue build time."""
    current = session(ctx)
    try:
        entry = lookup(building, level)
    except KeyError as exc:
        fail(str(exc.args[0]))
    state, config = current.load()
    task_id = next_task_id(state.tasks, int(current.now.timestamp() * 1000))
    task = task_from_reference(entry, task_id)
    if task.duration_ms == 0:
        fail(f"{task.name} has no build time; nothing to queue")
    current.commit_tasks(state, config, [*state.tasks, task])
    console.print(f"Queued {task.name} ({task.duration_text}, {task.priority.value} priority).")
