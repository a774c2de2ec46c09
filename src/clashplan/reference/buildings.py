"""Bundled building catalogue (lookup by building type, level and town hall)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from clashplan.scenario.contract.models import Category, Priority, Task
from clashplan.scheduling.timeline.durations import parse_build_time

_CATALOGUE_PATH = Path(__file__).resolve().parents[1] / "data" / "buildings.json"


@dataclass(frozen=True)
class BuildingLevel:
    building_type: str
    category: Category
    level: int
    build_time: str
    town_hall: int

    @property
    def display_name(self) -> str:
        return self.building_type.replace("_", " ")

    @property
    def duration_ms(self) -> int:
        return parse_build_time(self.build_time)


@lru_cache(maxsize=1)
def _load_payload() -> dict:
    if not _CATALOGUE_PATH.exists():
        raise FileNotFoundError(f"Building catalogue missing: {_CATALOGUE_PATH}")
    return json.loads(_CATALOGUE_PATH.read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def load_catalogue() -> tuple[BuildingLevel, ...]:
    """Return every catalogue level, ordered by building then level."""

    entries = []
    for building in _load_payload()["buildings"]:
        category = Category(building["category"])
        for level in building["levels"]:
            entries.append(
                BuildingLevel(
                    building_type=building["type"],
                    category=category,
                    level=int(level["level"]),
                    build_time=str(level["build_time"]),
                    town_hall=int(level["town_hall"]),
                )
            )
    entries.sort(key=lambda entry: (entry.building_type, entry.level))
    return tuple(entries)


def _normalise_type(name: str) -> str:
    return name.strip().replace(" ", "_").lower()


def building_types() -> list[str]:
    return sorted({entry.building_type for entry in load_catalogue()})


def lookup(building: str, level: int) -> BuildingLevel:
    """Return the catalogue entry for ``building`` (``"Archer Tower"`` or ``"Archer_Tower"``)."""

    wanted = _normalise_type(building)
    for entry in load_catalogue():
        if _normalise_type(entry.building_type) == wanted and entry.level == level:
            return entry
    raise KeyError(f"No catalogue entry for {building!r} level {level}")


def levels_for_town_hall(
    town_hall: int, category: Category | None = None
) -> list[BuildingLevel]:
    """Entries unlocked at ``town_hall`` or below, optionally limited to one category."""

    return [
        entry
        for entry in load_catalogue()
        if entry.town_hall <= town_hall and (category is None or entry.category == category)
    ]


def task_from_reference(entry: BuildingLevel, task_id: int) -> Task:
    """Queue task for upgrading to ``entry``; resource buildings default to high priority."""

    priority = Priority.HIGH if entry.category == Category.RESOURCE else Priority.MEDIUM
    return Task(
        id=task_id,
        name=f"{entry.display_name} Level {entry.level}",
        base_name=entry.display_name,
        category=entry.category,
        duration_ms=entry.duration_ms,
        priority=priority,
    )


__all__ = [
    "BuildingLevel",
    "load_catalogue",
    "building_types",
    "lookup",
    "levels_for_town_hall",
    "task_from_reference",
]
