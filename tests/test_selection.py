from datetime import timedelta

from clashplan.planning import init_workers, set_worker_task
from clashplan.scheduling.engine import generate_schedule
from clashplan.scheduling.selection import toggle_schedule_selection, worker_display_name


def test_toggle_selects_then_clears():
    selected, indices = toggle_schedule_selection({}, {}, 1, 42, 0)
    assert selected == {"1": 42}
    assert indices == {"1": 0}

    switched, indices = toggle_schedule_selection(selected, indices, 1, 43, 1)
    assert switched == {"1": 43}
    assert indices == {"1": 1}

    cleared, indices = toggle_schedule_selection(switched, indices, 1, 43, 1)
    assert cleared == {}
    assert indices == {}
    assert selected == {"1": 42}


def test_display_name_prefers_selection_then_current_task(make_task, now):
    workers = set_worker_task(init_workers(2, now), 2, "Clan Castle")
    tasks = [make_task(1, name="Cannon"), make_task(2, name="Mine")]
    entries = generate_schedule(tasks, init_workers(2, now), sleep_hour=22).entries

    assert worker_display_name(1, entries, workers, {}) == "Builder 1"
    assert worker_display_name(1, entries, workers, {"1": tasks[0].id}) == "Builder 1 - Cannon"
    assert worker_display_name(2, entries, workers, {}) == "Builder 2 - Clan Castle"
    assert worker_display_name(2, entries, workers, {"2": 999}) == "Builder 2 - Clan Castle"
    assert worker_display_name(5, entries, workers, {}) == "Builder 5"
    assert entries[1].end_time == now + timedelta(hours=2)
