from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from clashplan.cli._state import STORE_ENV, CliSession, default_store_path, session
from clashplan.cli._utils import fail, parse_now, tasks_table, workers_table
from clashplan.cli.catalogue import ref_app
from clashplan.cli.schedule import schedule_app
from clashplan.cli.settings import sleep_app
from clashplan.cli.share import share_app
from clashplan.cli.tasks import tasks_app
from clashplan.cli.workers import workers_app
from clashplan.core.errors import ClashPlanValueError
from clashplan.optimization import optimize_for_config, project_completion
from clashplan.planning.pool import resize_worker_pool
from clashplan.scenario.contract.models import Optimality
from clashplan.scenario.io import load_plan
from clashplan.scheduling.timeline.durations import format_absolute_time, format_duration
from clashplan.telemetry import RunTelemetryLogger

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Builder upgrade planner.")
app.add_typer(workers_app, name="workers")
app.add_typer(tasks_app, name="tasks")
app.add_typer(sleep_app, name="sleep")
app.add_typer(schedule_app, name="schedule")
app.add_typer(share_app, name="share")
app.add_typer(ref_app, name="ref")
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    store: Path | None = typer.Option(
        None,
        "--store",
        help=f"SQLite state file (default: ${STORE_ENV} or ~/.clashplan/state.db).",
        dir_okay=False,
    ),
    now: str | None = typer.Option(
        None, "--now", help="Treat this ISO timestamp (YYYY-MM-DDTHH:MM) as the current time."
    ),
) -> None:
    ctx.obj = CliSession(store_path=store or default_store_path(), now=parse_now(now))


@app.command()
def status(ctx: typer.Context) -> None:
    """Summarise builders and the queue, with projected completion times."""
    current = session(ctx)
    state, config = current.load()
    console.print(workers_table(state.workers, current.now))
    if not state.tasks:
        console.print("Upgrade queue is empty.")
        return
    projection = project_completion(state.tasks, config, current.now)
    table = Table(title="Queue projection (single builder)")
    table.add_column("#", justify="right")
    table.add_column("Task")
    table.add_column("Duration")
    table.add_column("Done at")
    for position, (task, end) in enumerate(zip(projection.tasks, projection.end_times), start=1):
        table.add_row(str(position), task.name, task.duration_text, format_absolute_time(end))
    console.print(table)
    console.print(f"Total build time: {format_duration(projection.total_ms)}")


@app.command()
def optimize(
    ctx: typer.Context,
    apply: bool = typer.Option(False, "--apply", help="Save the optimized order."),
    telemetry_log: Path | None = typer.Option(
        None, "--telemetry-log", help="Append a JSONL run record to this path.", dir_okay=False
    ),
) -> None:
    """Reorder the queue so long upgrades run overnight and short ones fill the evening."""
    current = session(ctx)
    state, config = current.load()
    if not state.tasks:
        fail("Add tasks to the queue first")
    if telemetry_log is None:
        ordered = optimize_for_config(state.tasks, config, current.now)
    else:
        with RunTelemetryLogger(
            log_path=telemetry_log,
            operation="optimize",
            store_path=str(current.store_path),
            config=config.model_dump(mode="json"),
            context={"tasks": len(state.tasks), "now": current.now.isoformat(timespec="minutes")},
        ) as logger:
            ordered = optimize_for_config(state.tasks, config, current.now)
            logger.finalize(
                metrics={
                    "tasks": len(ordered),
                    "optimal": sum(1 for t in ordered if t.optimality is Optimality.OPTIMAL),
                    "reordered": [t.id for t in ordered] != [t.id for t in state.tasks],
                }
            )
    window = config.window_for(current.now)
    console.print(
        f"Sleep window {format_absolute_time(window.start)} -> {format_absolute_time(window.end)}"
    )
    console.print(tasks_table(ordered, title="Optimized queue"))
    if apply:
        current.save(state.model_copy(update={"tasks": ordered}))
        console.print("[green]Optimized order saved.[/green]")


@app.command("load")
def load(
    ctx: typer.Context,
    plan: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML plan file."),
) -> None:
    """Replace the queue (and optionally builder count and sleep settings) from a plan file."""
    current = session(ctx)
    state, _ = current.load()
    try:
        plan_input = load_plan(plan, now_ms=int(current.now.timestamp() * 1000))
        workers = state.workers
        count = state.worker_count
        if plan_input.worker_count is not None:
            count = plan_input.worker_count
            workers = resize_worker_pool(workers, count, current.now)
    except (OSError, ClashPlanValueError) as exc:
        fail(str(exc))
    current.save_config(plan_input.config)
    current.save(
        state.model_copy(
            update={
                "tasks": plan_input.tasks,
                "workers": workers,
                "worker_count": count,
                "schedule": [],
                "selected_schedule_tasks": {},
                "first_checked_task_indices": {},
            }
        )
    )
    console.print(
        f"Loaded {len(plan_input.tasks)} task(s) and {count} builder(s) from {plan}."
    )


if __name__ == "__main__":
    app()
