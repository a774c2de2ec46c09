from __future__ import annotations

from datetime import datetime
from itertools import count

import pytest

from clashplan.scenario.contract import Category, Priority, Task
from clashplan.scheduling.timeline.durations import HOUR_MS, MINUTE_MS
from clashplan.storage import MemoryStore


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 5, 1, 10, 0)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def make_task():
    ids = count(1)

    def _make(
        hours: float = 1,
        *,
        name: str | None = None,
        category: Category = Category.OTHER,
        priority: Priority = Priority.MEDIUM,
        task_id: int | None = None,
    ) -> Task:
        identifier = task_id if task_id is not None else next(ids)
        minutes = int(round(hours * 60))
        return Task(
            id=identifier,
            name=name or f"Task {identifier}",
            category=category,
            duration_ms=(minutes // 60) * HOUR_MS + (minutes % 60) * MINUTE_MS,
            priority=priority,
        )

    return _make
