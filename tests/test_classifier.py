from datetime import datetime

import pytest

from clashplan.optimization import (
    classify_against_sleep_window,
    is_start_time_good_for_sleep_schedule,
)
from clashplan.scenario.contract import Optimality
from clashplan.scheduling.timeline.durations import HOUR_MS, MINUTE_MS

SLEEP_START = datetime(2024, 5, 1, 22)
SLEEP_END = datetime(2024, 5, 2, 6)


def _classify(task, start, **kwargs):
    return classify_against_sleep_window(task, start, SLEEP_START, SLEEP_END, **kwargs)


def test_short_task_well_before_sleep_is_optimal(make_task):
    assert _classify(make_task(3), datetime(2024, 5, 1, 10)) is Optimality.OPTIMAL


def test_completion_inside_window_is_suboptimal(make_task):
    assert _classify(make_task(7), datetime(2024, 5, 1, 20)) is Optimality.SUBOPTIMAL


def test_long_task_ending_near_bedtime_is_suboptimal(make_task):
    assert _classify(make_task(11), datetime(2024, 5, 1, 10)) is Optimality.SUBOPTIMAL
    assert _classify(make_task(10), datetime(2024, 5, 1, 10)) is Optimality.OPTIMAL


def test_short_task_inside_buffer_is_suboptimal(make_task):
    task = make_task(1)
    start = datetime(2024, 5, 1, 20)
    assert _classify(task, start) is Optimality.SUBOPTIMAL
    assert _classify(task, start, buffer_ms=30 * MINUTE_MS) is Optimality.OPTIMAL


def test_long_threshold_is_configurable(make_task):
    task = make_task(5)
    start = datetime(2024, 5, 1, 15, 30)
    assert _classify(task, start) is Optimality.SUBOPTIMAL
    assert _classify(task, start, long_threshold_ms=4 * HOUR_MS) is Optimality.OPTIMAL


def test_classifier_is_deterministic(make_task):
    task = make_task(8)
    start = datetime(2024, 5, 1, 12)
    assert len({_classify(task, start) for _ in range(5)}) == 1


@pytest.mark.parametrize(
    "hours, start_hour, sleep_hour, expected",
    [
        (10, 20, 22, True),
        (10, 22, 22, True),
        (10, 10, 22, False),
        (10, 23, 1, True),
        (1, 10, 22, True),
        (1, 18, 22, False),
        (8, 20, 22, False),
    ],
)
def test_start_time_goodness(hours, start_hour, sleep_hour, expected):
    assert (
        is_start_time_good_for_sleep_schedule(hours * HOUR_MS, start_hour, sleep_hour) is expected
    )
