import pytest

from clashplan.reference import (
    building_types,
    levels_for_town_hall,
    load_catalogue,
    lookup,
    task_from_reference,
)
from clashplan.scenario.contract import Category, Priority
from clashplan.scheduling.timeline.durations import to_millis


def test_catalogue_loads_sorted_entries():
    entries = load_catalogue()
    assert entries
    keys = [(e.building_type, e.level) for e in entries]
    assert keys == sorted(keys)
    assert "Gold_Mine" in building_types()


def test_lookup_accepts_spaced_names():
    entry = lookup("archer tower", 10)
    assert entry.category is Category.DEFENSE
    assert entry.duration_ms == to_millis(1, 12, 0)
    with pytest.raises(KeyError):
        lookup("Archer Tower", 99)


def test_levels_for_town_hall_filters():
    unlocked = levels_for_town_hall(3)
    assert unlocked
    assert all(e.town_hall <= 3 for e in unlocked)
    resource = levels_for_town_hall(10, Category.RESOURCE)
    assert {e.category for e in resource} == {Category.RESOURCE}


def test_task_from_reference_names_and_priority():
    mine = task_from_reference(lookup("Gold Mine", 10), task_id=7)
    assert mine.name == "Gold Mine Level 10"
    assert mine.base_name == "Gold Mine"
    assert mine.priority is Priority.HIGH
    assert mine.id == 7

    cannon = task_from_reference(lookup("Cannon", 8), task_id=8)
    assert cannon.priority is Priority.MEDIUM
    assert cannon.duration_ms == to_millis(0, 10, 0)
