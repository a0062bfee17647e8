"""A cron scheduler that runs job callbacks at their scheduled times."""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from functools import partial
from typing import Any

from cronkit.calculate import CronCalculationError, next_fire
from cronkit.jobs import CronJob, JobList

__all__ = ["SchedulerError", "Scheduler"]

_LOG = logging.getLogger(__name__)

_MIN_DELAY = 0.001
_QUEUE_SIZE = 10
_SLOW_CALLBACK_SECONDS = 5.0


class SchedulerError(RuntimeError):
    """Raised when the scheduler cannot perform a requested operation."""


def _spawn_thread(function: Callable[[], None]) -> None:
    threading.Thread(target=function, daemon=True).start()


class Scheduler:
    """Keeps cron jobs in execution order and fires their callbacks.

    ``clock`` returns the current Unix time and ``sleep`` waits a number of
    seconds; ``spawn`` runs a callable, by default on a new daemon thread.
    Schedules are matched in local time unless ``utc`` is true.
    """

    def __init__(
        self,
        *,
        utc: bool = False,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Any] = time.sleep,
        spawn: Callable[[Callable[[], None]], Any] | None = None,
    ) -> None:
        self._utc = utc
        self._clock = clock
        self._sleep = sleep
        self._spawn = spawn or _spawn_thread
        self._jobs = JobList()
        self._lock = threading.RLock()
        self._running = False
        self._next_id = 1
        self._seconds_until = -1
        self._queue: queue.Queue[CronJob | None] | None = None
        self._worker: threading.Thread | None = None
        self._timer: threading.Timer | None = None

    @property
    def running(self) -> bool:
        """Whether the scheduler is currently running."""
        return self._running

    def __len__(self) -> int:
        return len(self._jobs)

    # ------------------------------------------------------------------ jobs

    def create_job(
        self,
        schedule: str,
        callback: Callable[[CronJob], Any] | None = None,
        data: Any = None,
    ) -> CronJob:
        """Create a job for ``schedule`` and schedule it.

        Raises :class:`~cronkit.expression.CronParseError` for an invalid
        schedule.
        """
        with self._lock:
            job = CronJob(callback=callback, data=data, id=self._next_id)
            self._next_id += 1
        job.load_expression(schedule)
        self.schedule(job)
        return job

    def destroy_job(self, job: CronJob) -> None:
        """Remove ``job`` from the schedule."""
        if job is None:
            raise SchedulerError("no job given")
        self.unschedule(job)

    def clear_all(self) -> None:
        """Remove every job from the schedule."""
        with self._lock:
            while (job := self._jobs.first()) is not None:
                self.destroy_job(job)

    def schedule(self, job: CronJob) -> None:
        """Compute the next execution of ``job`` and put it in the schedule."""
        with self._lock:
            self._place(job)
            if self._jobs.first() is job:
                self._schedule_next_timer()

    def unschedule(self, job: CronJob) -> None:
        """Take ``job`` out of the schedule; nothing happens if it is absent."""
        if job is None:
            raise SchedulerError("no job given")
        with self._lock:
            if job.id in self._jobs:
                self._jobs.remove(job.id)

    def seconds_until_next_execution(self) -> int:
        """Seconds until the next job is due, as last computed; -1 if never."""
        return self._seconds_until

    # ------------------------------------------------------------- lifecycle

    def start(self) -> None:
        """Start the timer and the worker that dispatches due jobs."""
        with self._lock:
            if self._running or self._worker is not None:
                raise SchedulerError("scheduler is already running")
            jobs_queue: queue.Queue[CronJob | None] = queue.Queue(maxsize=_QUEUE_SIZE)
            worker = threading.Thread(
                target=self._work, args=(jobs_queue,), name="cron_worker", daemon=True
            )
            self._queue = jobs_queue
            self._worker = worker
            worker.start()
            self._running = True
            self._schedule_next_timer()

    def stop(self) -> None:
        """Stop the scheduler and remove every job."""
        with self._lock:
            if not self._running:
                raise SchedulerError("scheduler is not running")
            self._shutdown()
            self.clear_all()

    def run_task(self, once: bool = False) -> None:
        """Run due jobs synchronously, sleeping until the next one is due.

        Loops until no jobs remain, or performs a single step if ``once`` is
        true. Afterwards the scheduler is no longer running; the jobs stay in
        the schedule.
        """
        while True:
            self._running = True
            now = self._now()
            job = self._jobs.first()
            if job is None:
                break
            if now >= job.next_execution:
                self._spawn(partial(self._run, job))
                with self._lock:
                    if job.id in self._jobs:
                        self._jobs.remove(job.id)
                    self.schedule(job)
            else:
                self._seconds_until = job.next_execution - now
                self._sleep(self._seconds_until)
            if once:
                break
        with self._lock:
            self._shutdown()

    # ------------------------------------------------------------- internals

    def _now(self) -> int:
        return int(self._clock())

    def _place(self, job: CronJob) -> None:
        if job is None or not job.has_loaded():
            raise SchedulerError("job has no loaded expression")
        job.next_execution = next_fire(job.expression, self._now(), utc=self._utc)
        job.last_triggered_sec = -1
        if job.id in self._jobs:
            self._jobs.remove(job.id)
        self._jobs.insert(job)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_next_timer(self) -> None:
        job = self._jobs.first()
        if job is None:
            self._cancel_timer()
            return
        now = self._now()
        if self._running:
            self._cancel_timer()
            delay = max(float(job.next_execution - now), _MIN_DELAY)
            timer = threading.Timer(delay, self._on_timer)
            timer.daemon = True
            self._timer = timer
            timer.start()
        self._seconds_until = job.next_execution - now

    def _on_timer(self) -> None:
        with self._lock:
            if not self._running:
                return
            now = self._now()
            due: list[CronJob] = []
            while (job := self._jobs.first()) is not None and job.next_execution <= now:
                if job.last_triggered_sec != now:
                    job.last_triggered_sec = now
                    if self._queue is not None:
                        try:
                            self._queue.put_nowait(job)
                        except queue.Full:
                            _LOG.warning("cron job %d dropped: queue is full", job.id)
                self._jobs.remove(job.id)
                due.append(job)
            for job in due:
                try:
                    self._place(job)
                except CronCalculationError:
                    _LOG.warning("cron job %d has no further execution time", job.id)
            self._schedule_next_timer()

    def _work(self, jobs_queue: queue.Queue[CronJob | None]) -> None:
        while True:
            job = jobs_queue.get()
            if job is None:
                return
            self._spawn(partial(self._run, job))

    @staticmethod
    def _run(job: CronJob) -> None:
        started = time.monotonic()
        if job.callback is not None:
            job.callback(job)
        if time.monotonic() - started > _SLOW_CALLBACK_SECONDS:
            _LOG.warning("cron job %d callback took too long", job.id)

    def _shutdown(self) -> None:
        self._running = False
        self._cancel_timer()
        if self._queue is not None:
            self._queue.put(None)
        self._queue = None
        self._worker = None