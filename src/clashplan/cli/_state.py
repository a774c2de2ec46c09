"""Store resolution and load/save helpers shared by the CLI commands."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import typer

from clashplan.cli._utils import console, fail
from clashplan.core.errors import StateLoadError
from clashplan.optimization.optimizer import auto_optimize
from clashplan.planning.pool import refresh_workers
from clashplan.scenario.contract.models import PlannerState, Task
from clashplan.scheduling.timeline.models import SchedulerConfig
from clashplan.storage import SQLiteStore, load_config, load_state, save_config, save_state

STORE_ENV = "CLASHPLAN_STORE"


def default_store_path() -> Path:
    override = os.getenv(STORE_ENV)
    if override:
        return Path(override)
    return Path.home() / ".clashplan" / "state.db"


@dataclass(slots=True)
class CliSession:
    """Per-invocation context: where state lives and which instant counts as now."""

    store_path: Path
    now: datetime
    _store: SQLiteStore | None = field(default=None, init=False, repr=False)

    @property
    def store(self) -> SQLiteStore:
        if self._store is None:
            self._store = SQLiteStore(self.store_path)
        return self._store

    def load(self) -> tuple[PlannerState, SchedulerConfig]:
        """Load planner state and settings, releasing builders whose timers have run out."""

        try:
            state = load_state(self.store, self.now)
            config = load_config(self.store)
        except StateLoadError as exc:
            fail(str(exc))
        workers = refresh_workers(state.workers, self.now)
        return state.model_copy(update={"workers": workers}), config

    def save(self, state: PlannerState) -> None:
        save_state(self.store, state)

    def save_config(self, config: SchedulerConfig) -> None:
        save_config(self.store, config)

    def commit_tasks(
        self, state: PlannerState, config: SchedulerConfig, tasks: list[Task]
    ) -> PlannerState:
        """Persist a new queue, re-optimizing it first when automatic optimization is on."""

        ordered, changed = auto_optimize(tasks, config, self.now)
        if changed:
            console.print("[cyan]Queue re-ordered to fit your sleep window.[/cyan]")
        updated = state.model_copy(update={"tasks": ordered})
        self.save(updated)
        return updated


def session(ctx: typer.Context) -> CliSession:
    current = ctx.find_object(CliSession)
    if current is None:
        current = CliSession(store_path=default_store_path(), now=datetime.now())
        ctx.obj = current
    return current


__all__ = ["STORE_ENV", "default_store_path", "CliSession", "session"]
