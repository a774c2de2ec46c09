"""Priority tiers and the category override table."""

from __future__ import annotations

from collections.abc import Mapping
from enum import IntEnum

from clashplan.scenario.contract.models import Category, Priority, Task


class PriorityTier(IntEnum):
    """Scheduling tier; lower values are scheduled first."""

    HIGH = 0
    MEDIUM = 1
    LOW = 2


_PRIORITY_TIER: Mapping[Priority, PriorityTier] = {
    Priority.HIGH: PriorityTier.HIGH,
    Priority.MEDIUM: PriorityTier.MEDIUM,
    Priority.LOW: PriorityTier.LOW,
}

# category -> forced minimum tier
CATEGORY_TIER_OVERRIDES: Mapping[Category, PriorityTier] = {
    Category.RESOURCE: PriorityTier.HIGH,
}


def tier_for(
    task: Task, overrides: Mapping[Category, PriorityTier] | None = None
) -> PriorityTier:
    """Return the tier of ``task``, promoted by any category override."""

    table = CATEGORY_TIER_OVERRIDES if overrides is None else overrides
    tier = _PRIORITY_TIER[task.priority]
    forced = table.get(task.category)
    if forced is not None and forced < tier:
        return forced
    return tier


__all__ = ["PriorityTier", "CATEGORY_TIER_OVERRIDES", "tier_for"]
