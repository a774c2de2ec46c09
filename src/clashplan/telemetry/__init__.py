"""Run telemetry for planner operations."""

from .jsonl import append_jsonl, iter_jsonl
from .run_logger import RunTelemetryLogger

__all__ = ["append_jsonl", "iter_jsonl", "RunTelemetryLogger"]
