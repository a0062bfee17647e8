"""Cron expressions with second resolution, a job list and an in-process scheduler."""

__version__ = "0.1.0"
__all__ = ["calculate", "example", "expression", "jobs", "scheduler"]