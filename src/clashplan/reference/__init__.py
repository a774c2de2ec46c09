"""Static reference data (building catalogue)."""

from .buildings import (
    BuildingLevel,
    building_types,
    levels_for_town_hall,
    load_catalogue,
    lookup,
    task_from_reference,
)

__all__ = [
    "BuildingLevel",
    "load_catalogue",
    "building_types",
    "lookup",
    "levels_for_town_hall",
    "task_from_reference",
]
