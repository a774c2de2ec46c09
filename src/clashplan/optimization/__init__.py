"""Queue optimization: priority tiers, sleep-window classifier and the reordering pass."""

from .classifier import classify_against_sleep_window, is_start_time_good_for_sleep_schedule
from .optimizer import (
    QueueProjection,
    auto_optimize,
    optimize_for_config,
    optimize_queue,
    project_completion,
)
from .tiers import CATEGORY_TIER_OVERRIDES, PriorityTier, tier_for

__all__ = [
    "classify_against_sleep_window",
    "is_start_time_good_for_sleep_schedule",
    "optimize_queue",
    "optimize_for_config",
    "auto_optimize",
    "project_completion",
    "QueueProjection",
    "PriorityTier",
    "CATEGORY_TIER_OVERRIDES",
    "tier_for",
]
