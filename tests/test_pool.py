from datetime import datetime, timedelta

import pytest

from clashplan.core.errors import WorkerPoolError
from clashplan.planning import (
    init_workers,
    refresh_workers,
    remaining_time,
    resize_worker_pool,
    set_worker_busy,
    set_worker_idle,
    set_worker_task,
)
from clashplan.scenario.contract import WorkerStatus


def test_init_workers_are_idle_and_numbered(now):
    workers = init_workers(3, now)
    assert [w.id for w in workers] == [1, 2, 3]
    assert [w.name for w in workers] == ["Builder 1", "Builder 2", "Builder 3"]
    assert all(w.status is WorkerStatus.IDLE and w.available_at == now for w in workers)


def test_resize_preserves_prefix(now):
    workers = set_worker_busy(init_workers(3, now), 2, now, hours=1, task="Cannon")
    later = now + timedelta(minutes=5)

    grown = resize_worker_pool(workers, 5, later)
    assert grown[:3] == workers
    assert [w.id for w in grown[3:]] == [4, 5]
    assert all(w.status is WorkerStatus.IDLE and w.available_at == later for w in grown[3:])

    shrunk = resize_worker_pool(grown, 2, later)
    assert shrunk == workers[:2]
    assert shrunk[1].current_task == "Cannon"


@pytest.mark.parametrize("count", [0, 7])
def test_resize_rejects_out_of_range(now, count):
    with pytest.raises(WorkerPoolError):
        resize_worker_pool(init_workers(2, now), count, now)


def test_busy_and_idle_round_trip(now):
    workers = init_workers(2, now)
    busy = set_worker_busy(workers, 1, now, days=1, hours=2, minutes=5, task="Gold Mine")
    assert busy[0].status is WorkerStatus.BUSY
    assert busy[0].available_at == datetime(2024, 5, 2, 12, 5)
    assert remaining_time(busy[0], now) == (1, 2, 5)
    assert workers[0].status is WorkerStatus.IDLE

    freed = set_worker_idle(busy, 1, now)
    assert freed[0].status is WorkerStatus.IDLE
    assert freed[0].current_task is None
    assert remaining_time(freed[0], now) == (0, 0, 0)


def test_unknown_worker_id(now):
    with pytest.raises(WorkerPoolError):
        set_worker_idle(init_workers(2, now), 9, now)


def test_set_worker_task_clears_with_empty_label(now):
    workers = set_worker_task(init_workers(1, now), 1, "Wall")
    assert workers[0].current_task == "Wall"
    assert set_worker_task(workers, 1, "")[0].current_task is None


def test_refresh_releases_finished_workers(now):
    workers = set_worker_busy(init_workers(2, now), 1, now, hours=1)
    workers = set_worker_busy(workers, 2, now, hours=5)
    later = now + timedelta(hours=2)

    refreshed = refresh_workers(workers, later)
    assert refreshed[0].status is WorkerStatus.IDLE
    assert refreshed[0].available_at == later
    assert refreshed[1] == workers[1]
