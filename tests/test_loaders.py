from datetime import time
from pathlib import Path

import pytest

from clashplan.core.errors import TaskValidationError
from clashplan.scenario.contract import Category, Priority
from clashplan.scenario.io import load_plan, load_task_queue
from clashplan.scheduling.timeline.durations import to_millis


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_yaml_queue_expands_batches(tmp_path):
    path = _write(
        tmp_path / "queue.yaml",
        """
tasks:
  - name: Cannon
    category: Defense
    hours: 2
    quantity: 2
  - name: Gold Mine
    category: resource
    duration: 1d 4h
    priority: high
""",
    )
    tasks = load_task_queue(path, now_ms=10)
    assert [t.name for t in tasks] == ["Cannon (1/2)", "Cannon (2/2)", "Gold Mine"]
    assert [t.id for t in tasks] == [10, 11, 12]
    assert tasks[2].category is Category.RESOURCE
    assert tasks[2].priority is Priority.HIGH
    assert tasks[2].duration_ms == to_millis(1, 4, 0)


def test_csv_queue_with_blank_cells(tmp_path):
    path = _write(
        tmp_path / "queue.csv",
        "name,category,days,hours,minutes,priority,quantity\n"
        "Army Camp,army,1,,,low,\n"
        "Wall,wall,,,30,,3\n",
    )
    tasks = load_task_queue(path, now_ms=1)
    assert len(tasks) == 4
    assert tasks[0].duration_ms == to_millis(1, 0, 0)
    assert tasks[0].priority is Priority.LOW
    assert [t.base_name for t in tasks[1:]] == ["Wall"] * 3


def test_invalid_row_reports_position(tmp_path):
    path = _write(tmp_path / "bad.yaml", "tasks:\n  - name: Cannon\n    hours: 1\n  - name: Empty\n")
    with pytest.raises(TaskValidationError, match="task #2"):
        load_task_queue(path)


def test_plan_file_reads_workers_and_sleep(tmp_path):
    path = _write(
        tmp_path / "plan.yaml",
        """
workers: 3
sleep:
  start: "23:30"
  end: 07:00
  auto_optimize: false
  time_of_day: "23:00"
  duration_hours: 7
  buffer_minutes: 30
tasks:
  - {name: Laboratory, category: army, duration: 12h}
""",
    )
    plan = load_plan(path, now_ms=1)
    assert plan.worker_count == 3
    assert plan.config.sleep_start == time(23, 30)
    assert plan.config.sleep_end == time(7, 0)
    assert plan.config.auto_optimize is False
    assert plan.config.sleep_time_of_day == "23:00"
    assert plan.config.buffer_minutes == 30
    assert [t.name for t in plan.tasks] == ["Laboratory"]


def test_plan_file_rejects_bad_sleep_settings(tmp_path):
    path = _write(tmp_path / "plan.yaml", "sleep:\n  duration_hours: 20\ntasks: []\n")
    with pytest.raises(TaskValidationError):
        load_plan(path)


@pytest.mark.parametrize(
    "text, message",
    [
        ("tasks: [unclosed\n", "could not parse YAML"),
        ("- name: Cannon\n", "mapping of sections"),
        ("workers: abc\n", "whole number"),
        ("sleep: 22:00\n", "'sleep' must be a mapping"),
        ("tasks: Cannon\n", "'tasks' must be a list"),
        ("tasks:\n  - Cannon\n", "task #1"),
    ],
)
def test_plan_file_errors_name_the_file(tmp_path, text, message):
    path = _write(tmp_path / "plan.yaml", text)
    with pytest.raises(TaskValidationError, match=message) as excinfo:
        load_plan(path)
    assert "plan.yaml" in str(excinfo.value)


def test_unreadable_csv_is_wrapped(tmp_path):
    path = _write(tmp_path / "queue.csv", 'name,hours\n"Cannon,1\n')
    with pytest.raises(TaskValidationError, match="could not read CSV"):
        load_task_queue(path)
