"""Planner inputs: worker/task contract models and queue loaders."""
