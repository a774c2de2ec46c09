"""Builder pool commands."""

from __future__ import annotations

import typer

from clashplan.cli._state import session
from clashplan.cli._utils import console, fail, workers_table
from clashplan.core.errors import ClashPlanValueError
from clashplan.planning.pool import (
    MAX_WORKERS,
    MIN_WORKERS,
    resize_worker_pool,
    set_worker_busy,
    set_worker_idle,
    set_worker_task,
)

workers_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Manage the builder pool.")


@workers_app.command("show")
def show_workers(ctx: typer.Context) -> None:
    """Print every builder with its status and remaining time."""
    current = session(ctx)
    state, _ = current.load()
    console.print(workers_table(state.workers, current.now))


@workers_app.command("resize")
def resize(
    ctx: typer.Context,
    count: int = typer.Argument(..., help=f"Number of builders ({MIN_WORKERS}-{MAX_WORKERS})."),
) -> None:
    """Change the number of builders; existing builders keep their state."""
    current = session(ctx)
    state, _ = current.load()
    try:
        workers = resize_worker_pool(state.workers, count, current.now)
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.save(state.model_copy(update={"workers": workers, "worker_count": count}))
    suffix = " (includes the bonus builder)" if count == MAX_WORKERS else ""
    console.print(f"Builder pool now has {count} builder(s){suffix}.")


@workers_app.command("busy")
def busy(
    ctx: typer.Context,
    worker_id: int = typer.Argument(..., help="Builder id."),
    days: int = typer.Option(0, "--days", min=0),
    hours: int = typer.Option(0, "--hours", min=0),
    minutes: int = typer.Option(0, "--minutes", min=0),
    task: str | None = typer.Option(None, "--task", help="Label of the upgrade in progress."),
) -> None:
    """Mark a builder busy for the given remaining time."""
    current = session(ctx)
    state, _ = current.load()
    try:
        workers = set_worker_busy(
            state.workers,
            worker_id,
            current.now,
            days=days,
            hours=hours,
            minutes=minutes,
            task=task,
        )
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.save(state.model_copy(update={"workers": workers}))
    console.print(workers_table(workers, current.now))


@workers_app.command("idle")
def idle(ctx: typer.Context, worker_id: int = typer.Argument(..., help="Builder id.")) -> None:
    """Free a builder immediately."""
    current = session(ctx)
    state, _ = current.load()
    try:
        workers = set_worker_idle(state.workers, worker_id, current.now)
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.save(state.model_copy(update={"workers": workers}))
    console.print(f"Builder {worker_id} is idle.")


@workers_app.command("label")
def label(
    ctx: typer.Context,
    worker_id: int = typer.Argument(..., help="Builder id."),
    task: str = typer.Argument("", help="Current task label; empty clears it."),
) -> None:
    """Set or clear the label of a builder's current upgrade."""
    current = session(ctx)
    state, _ = current.load()
    try:
        workers = set_worker_task(state.workers, worker_id, task)
    except ClashPlanValueError as exc:
        fail(str(exc))
    current.save(state.model_copy(update={"workers": workers}))
    console.print(workers_table(workers, current.now))
