"""Schedule generation and viewing commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from clashplan.cli._state import session
from clashplan.cli._utils import console, fail
from clashplan.core.errors import ClashPlanValueError
from clashplan.evaluation import schedule_dataframe, schedule_summary, worker_timelines
from clashplan.scenario.contract.models import PlannerState
from clashplan.scheduling.engine import plan_schedule
from clashplan.scheduling.selection import toggle_schedule_selection, worker_display_name
from clashplan.telemetry import RunTelemetryLogger

schedule_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Generate and inspect builder schedules."
)

_STAGE_STYLE = {"active": "bold green", "last": "cyan", "queued": "white"}


def _print_schedule(state: PlannerState) -> None:
    timelines = worker_timelines(state.schedule)
    for worker_id, items in timelines.items():
        title = worker_display_name(
            worker_id, state.schedule, state.workers, state.selected_schedule_tasks
        )
        table = Table(title=title)
        table.add_column("Task")
        table.add_column("Category")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Duration")
        table.add_column("Start time")
        for item in items:
            entry = item.entry
            style = _STAGE_STYLE[item.stage]
            table.add_row(
                f"[{style}]{escape(entry.task_name)}[/{style}]",
                entry.task_category.value,
                item.start_label,
                item.end_label,
                entry.duration_text,
                "good" if entry.is_good_time else "[magenta]suboptimal[/magenta]",
            )
        console.print(table)
    summary = schedule_summary(state.schedule)
    console.print(
        f"{summary['tasks']} task(s), {summary['suboptimal_time_tasks']} with a suboptimal "
        f"start; all builders free at {summary['finish_time']}."
    )


@schedule_app.command("generate")
def generate(
    ctx: typer.Context,
    out_csv: Path | None = typer.Option(None, "--out-csv", help="Also write the schedule as CSV."),
    telemetry_log: Path | None = typer.Option(
        None,
        "--telemetry-log",
        help="Append a JSONL run record to this path.",
        writable=True,
        dir_okay=False,
    ),
) -> None:
    """Assign every queued task to the builder that frees up first."""
    current = session(ctx)
    state, config = current.load()

    def _run():
        try:
            return plan_schedule(state.tasks, state.workers, config, current.now)
        except ClashPlanValueError as exc:
            fail(str(exc))

    if telemetry_log is None:
        run = _run()
    else:
        with RunTelemetryLogger(
            log_path=telemetry_log,
            operation="schedule",
            store_path=str(current.store_path),
            config=config.model_dump(mode="json"),
            context={
                "workers": len(state.workers),
                "tasks": len(state.tasks),
                "now": current.now.isoformat(timespec="minutes"),
            },
        ) as logger:
            run = _run()
            logger.finalize(metrics=schedule_summary(run.entries))

    state = state.model_copy(
        update={
            "schedule": run.entries,
            "selected_schedule_tasks": {},
            "first_checked_task_indices": {},
        }
    )
    current.save(state)
    _print_schedule(state)
    if out_csv is not None:
        out_csv.parent.mkdir(parents=True, exist_ok=True)
        schedule_dataframe(run.entries).to_csv(out_csv, index=False)
        console.print(f"Saved schedule to {out_csv}")


@schedule_app.command("show")
def show(ctx: typer.Context) -> None:
    """Print the last generated schedule, one table per builder."""
    state, _ = session(ctx).load()
    if not state.schedule:
        console.print("No schedule yet; run 'clashplan schedule generate'.")
        return
    _print_schedule(state)


@schedule_app.command("clear")
def clear(ctx: typer.Context) -> None:
    """Discard the generated schedule and its selections."""
    current = session(ctx)
    state, _ = current.load()
    current.save(
        state.model_copy(
            update={"schedule": [], "selected_schedule_tasks": {}, "first_checked_task_indices": {}}
        )
    )
    console.print("Schedule cleared.")


@schedule_app.command("select")
def select(
    ctx: typer.Context,
    worker_id: int = typer.Argument(..., help="Builder id."),
    task_id: int = typer.Argument(..., help="Scheduled task id; selecting it again clears it."),
) -> None:
    """Mark which scheduled task a builder is working on."""
    current = session(ctx)
    state, _ = current.load()
    own = [entry for entry in state.schedule if entry.worker_id == worker_id]
    index = next((i for i, entry in enumerate(own) if entry.task_id == task_id), None)
    if index is None:
        fail(f"Task {task_id} is not scheduled on builder {worker_id}")
    selected, indices = toggle_schedule_selection(
        state.selected_schedule_tasks,
        state.first_checked_task_indices,
        worker_id,
        task_id,
        index,
    )
    state = state.model_copy(
        update={"selected_schedule_tasks": selected, "first_checked_task_indices": indices}
    )
    current.save(state)
    console.print(
        worker_display_name(worker_id, state.schedule, state.workers, state.selected_schedule_tasks)
    )
