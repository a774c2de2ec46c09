"""Builder-queue planning: worker pools, sleep-aware queue optimisation and schedules."""

__version__ = "0.1.0"
