from __future__ import annotations

from datetime import datetime, time
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from clashplan.cli.main import app
from clashplan.scenario.contract import Priority, WorkerStatus
from clashplan.storage import (
    STATE_KEY,
    MemoryStore,
    SQLiteStore,
    encode_token,
    load_config,
    load_state,
)
from clashplan.telemetry import iter_jsonl
from tests.cli import cli_text

runner = CliRunner()
NOW = datetime(2024, 5, 1, 10, 0)


@pytest.fixture
def db(tmp_path: Path) -> Path:
    return tmp_path / "state.db"


def invoke(db: Path, *args: str):
    return runner.invoke(app, ["--store", str(db), "--now", NOW.isoformat(), *args])


def stored(db: Path):
    return load_state(SQLiteStore(db), NOW)


def test_help_lists_command_groups():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    text = cli_text(result)
    for group in ("workers", "tasks", "sleep", "schedule", "share", "ref"):
        assert group in text


def test_store_location_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "env.db"
    monkeypatch.setenv("CLASHPLAN_STORE", str(target))
    result = runner.invoke(app, ["--now", NOW.isoformat(), "workers", "resize", "2"])
    assert result.exit_code == 0, cli_text(result)
    assert len(stored(target).workers) == 2


def test_workers_resize_and_busy(db):
    assert invoke(db, "workers", "resize", "6").exit_code == 0
    result = invoke(db, "workers", "busy", "2", "--hours", "3", "--task", "Cannon")
    assert result.exit_code == 0, cli_text(result)
    state = stored(db)
    assert state.worker_count == 6
    assert state.workers[1].status is WorkerStatus.BUSY
    assert state.workers[1].available_at == datetime(2024, 5, 1, 13, 0)

    result = invoke(db, "workers", "resize", "7")
    assert result.exit_code == 1
    assert "between 1 and 6" in cli_text(result)


def test_tasks_add_batch_and_list(db):
    result = invoke(db, "tasks", "add", "Cannon", "--hours", "1", "--quantity", "3")
    assert result.exit_code == 0, cli_text(result)
    assert "Queued 3 x Cannon." in cli_text(result)
    names = sorted(task.name for task in stored(db).tasks)
    assert names == ["Cannon (1/3)", "Cannon (2/3)", "Cannon (3/3)"]

    assert invoke(db, "tasks", "list", "--grouped").exit_code == 0


def test_tasks_add_rejects_zero_duration(db):
    result = invoke(db, "tasks", "add", "Cannon")
    assert result.exit_code == 1
    assert "duration" in cli_text(result)
    assert stored(db).tasks == []


def test_tasks_edit_commands(db):
    invoke(db, "sleep", "set", "--no-auto-optimize")
    invoke(db, "tasks", "add", "Wall", "--minutes", "30", "--quantity", "2", "--category", "wall")
    invoke(db, "tasks", "add", "Lab", "--duration", "1d 2h", "--priority", "low")
    ids = [task.id for task in stored(db).tasks]

    assert invoke(db, "tasks", "priority", str(ids[2]), "high").exit_code == 0
    assert invoke(db, "tasks", "rename", str(ids[2]), "Laboratory").exit_code == 0
    assert invoke(db, "tasks", "sort").exit_code == 0
    tasks = stored(db).tasks
    assert tasks[0].name == "Laboratory"
    assert tasks[0].priority is Priority.HIGH

    assert invoke(db, "tasks", "remove-group", str(ids[0]), "--one").exit_code == 0
    assert len(stored(db).tasks) == 2
    assert invoke(db, "tasks", "remove", str(ids[2])).exit_code == 0
    assert [t.base_name for t in stored(db).tasks] == ["Wall"]
    assert invoke(db, "tasks", "remove", "12345").exit_code == 1
    assert invoke(db, "tasks", "clear").exit_code == 0
    assert stored(db).tasks == []


def test_tasks_import_csv_appends(db, tmp_path):
    csv_path = tmp_path / "queue.csv"
    csv_path.write_text("name,category,hours,quantity\nMine,resource,2,2\n", encoding="utf-8")
    invoke(db, "tasks", "add", "Cannon", "--hours", "1")
    result = invoke(db, "tasks", "import", str(csv_path))
    assert result.exit_code == 0, cli_text(result)
    tasks = stored(db).tasks
    assert len(tasks) == 3
    assert len({task.id for task in tasks}) == 3


def test_sleep_settings_saved(db):
    result = invoke(
        db, "sleep", "set", "--start", "23:00", "--end", "07:30", "--sleep-duration", "9"
    )
    assert result.exit_code == 0, cli_text(result)
    config = load_config(SQLiteStore(db))
    assert config.sleep_start == time(23, 0)
    assert config.sleep_end == time(7, 30)
    assert config.sleep_duration_hours == 9

    result = invoke(db, "sleep", "set", "--buffer-minutes", "30", "--long-task-hours", "4")
    assert result.exit_code == 0, cli_text(result)
    config = load_config(SQLiteStore(db))
    assert (config.buffer_minutes, config.long_task_hours) == (30, 4)
    assert config.sleep_start == time(23, 0)

    result = invoke(db, "sleep", "set", "--start", "late")
    assert result.exit_code == 1
    assert invoke(db, "sleep", "show").exit_code == 0


def test_schedule_generate_exports_and_logs(db, tmp_path):
    invoke(db, "workers", "resize", "2")
    invoke(db, "tasks", "add", "Cannon", "--hours", "1")
    invoke(db, "tasks", "add", "Tower", "--hours", "10")
    out_csv = tmp_path / "out" / "schedule.csv"
    log = tmp_path / "runs.jsonl"

    result = invoke(
        db, "schedule", "generate", "--out-csv", str(out_csv), "--telemetry-log", str(log)
    )
    assert result.exit_code == 0, cli_text(result)

    frame = pd.read_csv(out_csv)
    assert len(frame) == 2
    assert set(frame["worker_id"]) == {1, 2}
    (record,) = list(iter_jsonl(log))
    assert record["operation"] == "schedule"
    assert record["metrics"]["tasks"] == 2
    assert len(stored(db).schedule) == 2
    assert invoke(db, "schedule", "show").exit_code == 0


def test_schedule_requires_tasks(db):
    result = invoke(db, "schedule", "generate")
    assert result.exit_code == 1
    assert "Add tasks to the queue first" in cli_text(result)


def test_schedule_select_toggles(db):
    invoke(db, "workers", "resize", "1")
    invoke(db, "tasks", "add", "Cannon", "--hours", "1")
    invoke(db, "schedule", "generate")
    task_id = stored(db).schedule[0].task_id

    result = invoke(db, "schedule", "select", "1", str(task_id))
    assert result.exit_code == 0, cli_text(result)
    assert "Builder 1 - Cannon" in cli_text(result)
    assert stored(db).selected_schedule_tasks == {"1": task_id}

    invoke(db, "schedule", "select", "1", str(task_id))
    assert stored(db).selected_schedule_tasks == {}
    assert invoke(db, "schedule", "select", "1", "999").exit_code == 1


def test_optimize_apply_reorders(db, tmp_path):
    invoke(db, "sleep", "set", "--no-auto-optimize")
    invoke(db, "tasks", "add", "Tower", "--hours", "10")
    invoke(db, "tasks", "add", "Cannon", "--hours", "1")
    log = tmp_path / "opt.jsonl"

    result = invoke(db, "optimize", "--apply", "--telemetry-log", str(log))
    assert result.exit_code == 0, cli_text(result)
    assert [t.base_name for t in stored(db).tasks] == ["Cannon", "Tower"]
    (record,) = list(iter_jsonl(log))
    assert record["metrics"]["reordered"] is True


def test_share_round_trip_between_stores(db, tmp_path):
    invoke(db, "tasks", "add", "Cannon", "--hours", "1")
    exported = invoke(db, "share", "export")
    assert exported.exit_code == 0, cli_text(exported)
    token = cli_text(exported).strip()

    other = tmp_path / "other.db"
    result = invoke(other, "share", "import", token)
    assert result.exit_code == 0, cli_text(result)
    assert [t.name for t in stored(other).tasks] == ["Cannon"]

    bad = invoke(other, "share", "import", "not-a-token")
    assert bad.exit_code == 1
    assert [t.name for t in stored(other).tasks] == ["Cannon"]

    invalid = encode_token(MemoryStore({STATE_KEY: {"tasks": [{"id": 1}]}}), [STATE_KEY])
    rejected = invoke(other, "share", "import", invalid)
    assert rejected.exit_code == 1
    assert [t.name for t in stored(other).tasks] == ["Cannon"]


def test_ref_list_and_add(db):
    assert invoke(db, "ref", "list", "--town-hall", "5").exit_code == 0
    result = invoke(db, "ref", "add", "Gold Mine", "10")
    assert result.exit_code == 0, cli_text(result)
    (task,) = stored(db).tasks
    assert task.name == "Gold Mine Level 10"
    assert task.priority is Priority.HIGH
    assert invoke(db, "ref", "add", "Gold Mine", "99").exit_code == 1


def test_load_plan_file(db, tmp_path):
    plan = tmp_path / "plan.yaml"
    plan.write_text(
        "workers: 3\n"
        "sleep:\n  start: '23:00'\n  end: '07:00'\n"
        "tasks:\n  - {name: Cannon, hours: 2, quantity: 2}\n",
        encoding="utf-8",
    )
    result = invoke(db, "load", str(plan))
    assert result.exit_code == 0, cli_text(result)
    state = stored(db)
    assert state.worker_count == 3
    assert len(state.tasks) == 2
    assert load_config(SQLiteStore(db)).sleep_start == time(23, 0)
    assert invoke(db, "status").exit_code == 0


def test_load_plan_keeps_buffer_setting(db, tmp_path):
    plan = tmp_path / "plan.yaml"
    plan.write_text(
        "sleep:\n  buffer_minutes: 30\n  long_task_hours: 4\n"
        "tasks:\n  - {name: Cannon, hours: 2}\n",
        encoding="utf-8",
    )
    assert invoke(db, "load", str(plan)).exit_code == 0
    assert invoke(db, "tasks", "list").exit_code == 0
    config = load_config(SQLiteStore(db))
    assert config.buffer_minutes == 30
    assert config.long_task_hours == 4


@pytest.mark.parametrize(
    "text",
    ["tasks: [unclosed\n", "- Cannon\n- Mortar\n", "workers: abc\ntasks: []\n", "sleep: [1]\n"],
)
def test_load_rejects_malformed_plan(db, tmp_path, text):
    plan = tmp_path / "plan.yaml"
    plan.write_text(text, encoding="utf-8")
    result = invoke(db, "load", str(plan))
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_tasks_import_rejects_unreadable_csv(db, tmp_path):
    table = tmp_path / "queue.csv"
    table.write_text('name,hours\n"Cannon,1\n', encoding="utf-8")
    result = invoke(db, "tasks", "import", str(table))
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert stored(db).tasks == []
