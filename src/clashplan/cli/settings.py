"""Sleep-window settings commands."""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.table import Table

from clashplan.cli._state import session
from clashplan.cli._utils import console, fail
from clashplan.scheduling.timeline.durations import format_absolute_time, parse_clock
from clashplan.scheduling.timeline.models import SchedulerConfig

sleep_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Configure your sleep window.")


@sleep_app.command("show")
def show_settings(ctx: typer.Context) -> None:
    """Print the sleep settings and the window the optimizer is currently aiming at."""
    current = session(ctx)
    _, config = current.load()
    window = config.window_for(current.now)
    table = Table(title="Sleep settings")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Sleep", config.sleep_start.strftime("%H:%M"))
    table.add_row("Wake", config.sleep_end.strftime("%H:%M"))
    table.add_row("Auto-optimize", "on" if config.auto_optimize else "off")
    table.add_row("Bedtime (schedule hints)", config.sleep_time_of_day)
    table.add_row("Sleep duration", f"{config.sleep_duration_hours} h")
    table.add_row("Pre-sleep buffer", f"{config.buffer_minutes} min")
    table.add_row("Long task threshold", f"{config.long_task_hours} h")
    table.add_row(
        "Active window",
        f"{format_absolute_time(window.start)} -> {format_absolute_time(window.end)}",
    )
    console.print(table)


@sleep_app.command("set")
def set_settings(
    ctx: typer.Context,
    start: str | None = typer.Option(None, "--start", help="Bedtime, HH:MM."),
    end: str | None = typer.Option(None, "--end", help="Wake-up time, HH:MM."),
    auto_optimize: bool | None = typer.Option(
        None, "--auto-optimize/--no-auto-optimize", help="Reorder the queue automatically."
    ),
    sleep_time: str | None = typer.Option(
        None, "--sleep-time", help="Bedtime used for schedule start-time hints, HH:MM."
    ),
    sleep_duration: int | None = typer.Option(
        None, "--sleep-duration", help="Hours of sleep (1-12)."
    ),
    buffer_minutes: int | None = typer.Option(
        None, "--buffer-minutes", min=0, help="Gap short tasks must leave before bedtime."
    ),
    long_task_hours: int | None = typer.Option(
        None, "--long-task-hours", min=0, help="Tasks longer than this count as overnight candidates."
    ),
) -> None:
    """Update any subset of the sleep settings."""
    current = session(ctx)
    state, config = current.load()
    update: dict[str, object] = {}
    try:
        if start is not None:
            update["sleep_start"] = parse_clock(start)
        if end is not None:
            update["sleep_end"] = parse_clock(end)
        if auto_optimize is not None:
            update["auto_optimize"] = auto_optimize
        if sleep_time is not None:
            update["sleep_time_of_day"] = sleep_time
        if sleep_duration is not None:
            update["sleep_duration_hours"] = sleep_duration
        if buffer_minutes is not None:
            update["buffer_minutes"] = buffer_minutes
        if long_task_hours is not None:
            update["long_task_hours"] = long_task_hours
        config = SchedulerConfig.model_validate({**config.model_dump(), **update})
    except (ValidationError, ValueError) as exc:
        fail(str(exc))
    current.save_config(config)
    console.print("Sleep settings saved.")
    if config.auto_optimize and state.tasks:
        current.commit_tasks(state, config, list(state.tasks))
