"""Cron jobs and the list that keeps them in execution order."""

from __future__ import annotations

import bisect
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from cronkit.expression import CronExpr, parse_expr

__all__ = ["CronJob", "JobList"]


@dataclass(eq=False)
class CronJob:
    """A callback bound to a cron schedule.

    ``id`` identifies the job within a list; a value of -1 asks the list to
    assign one on insertion. ``next_execution`` is a Unix timestamp managed
    by the scheduler.
    """

    callback: Callable[[CronJob], Any] | None = None
    data: Any = None
    id: int = -1
    expression: CronExpr | None = None
    next_execution: int = 0
    last_triggered_sec: int = -1

    def load_expression(self, schedule: str) -> None:
        """Parse ``schedule`` and keep it as this job's expression.

        Raises :class:`~cronkit.expression.CronParseError` if it is invalid;
        the previously loaded expression is then left untouched.
        """
        self.expression = parse_expr(schedule)

    def has_loaded(self) -> bool:
        """Tell whether an expression has been loaded."""
        return self.expression is not None


def _execution_key(job: CronJob) -> int:
    return job.next_execution


class JobList:
    """Jobs ordered by their next execution time.

    Jobs with equal execution times keep the order they were inserted in.
    """

    def __init__(self) -> None:
        self._jobs: list[CronJob] = []
        self._next_id = 0
        self._lock = threading.RLock()

    def insert(self, job: CronJob) -> int:
        """Insert ``job`` in execution order and return its id.

        A job whose id is -1 is given the next free id, starting from 0.
        """
        if not isinstance(job, CronJob):
            raise TypeError("only CronJob instances can be inserted")
        with self._lock:
            bisect.insort_right(self._jobs, job, key=_execution_key)
            if job.id == -1:
                job.id = self._next_id
                self._next_id += 1
            return job.id

    def remove(self, job_id: int) -> CronJob:
        """Remove and return the job with ``job_id``; ``KeyError`` if absent."""
        with self._lock:
            for position, job in enumerate(self._jobs):
                if job.id == job_id:
                    del self._jobs[position]
                    return job
        raise KeyError(job_id)

    def first(self) -> CronJob | None:
        """Return the job that runs next, or ``None`` if the list is empty."""
        with self._lock:
            return self._jobs[0] if self._jobs else None

    def reset_id(self) -> bool:
        """Restart id assignment from 0 if the list is empty.

        Returns whether the ids were reset.
        """
        with self._lock:
            if self._jobs:
                return False
            self._next_id = 0
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __iter__(self) -> Iterator[CronJob]:
        with self._lock:
            snapshot = list(self._jobs)
        return iter(snapshot)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return any(job.id == job_id for job in self._jobs)