# cronkit

Cron expressions with second resolution, plus a small in-process scheduler
that runs Python callbacks when their expressions fire.

## Expressions

An expression has six space-separated fields:

```
second minute hour day-of-month month day-of-week
```

Each field takes `*`, single numbers, ranges (`10-15`), lists (`1,3,5`) and
steps (`*/15`, `1-6/2`, `57/2`). Day of month and day of week also take `?`.
Months take `JAN`–`DEC` and days of the week take `SUN`–`SAT`, in any case.
Sunday is `0` or `7`.

`parse_expr` (or `CronExpr.parse`) in `cronkit.expression` returns a frozen
`CronExpr` holding, for each field, the set of values that match. Months are
stored zero based (0 is January) and days of the week count from Sunday as 0.
An invalid expression raises `CronParseError`, a subclass of `ValueError`.

```python
from cronkit.expression import CronExpr, CronParseError, parse_expr
from cronkit.calculate import CronCalculationError, next_fire, prev_fire

expr = parse_expr("0 0 7 ? * MON-FRI")
ts = next_fire(expr, 1254011775, utc=True)   # next weekday at 07:00 UTC
before = prev_fire(expr, ts, utc=True)       # the weekday 07:00 before that

try:
    CronExpr.parse("77 * * * * *")
except CronParseError as exc:
    print(exc)   # Specified range exceeds maximum
```

`next_fire` and `prev_fire` in `cronkit.calculate` take and return Unix
timestamps and look strictly after or before the given time. With
`utc=False` (the default) the fields are matched against local time. When no
match exists within a few years (for example `0 0 0 31 6 *`),
`CronCalculationError` is raised.

## Jobs

`cronkit.jobs.CronJob` binds a callback, arbitrary `data`, an `id` and a
loaded expression; `load_expression(schedule)` parses and stores a schedule
and `has_loaded()` tells whether one is present. `next_execution` holds the
timestamp of its next run.

`cronkit.jobs.JobList` keeps jobs ordered by `next_execution` (equal times
keep insertion order). `insert` returns the job's id, giving jobs whose id is
-1 the next free id from 0; `remove(job_id)` returns the removed job or raises
`KeyError`; `first()` returns the next job or `None`; `reset_id()` restarts
id assignment when the list is empty. The list supports `len()`, iteration
and `job_id in job_list`.

## Scheduler

```python
from cronkit.scheduler import Scheduler

def tick(job):
    print("fired", job.id, job.data)

scheduler = Scheduler()
job = scheduler.create_job("*/5 * * * * *", tick, "every five seconds")
scheduler.start()
# ...
scheduler.stop()
```

`Scheduler` accepts keyword arguments `utc`, `clock` (returns the current
Unix time), `sleep` and `spawn` (runs a callable, by default on a new daemon
thread). Jobs created with `create_job` get ids counting from 1.

`schedule`, `unschedule`, `destroy_job` and `clear_all` manage the jobs,
`len(scheduler)` counts them, and `seconds_until_next_execution()` reports
the wait before the next one as last computed (-1 before any). `start()`
raises `SchedulerError` if already running and `stop()` raises it if not
running; `stop()` also removes every job. Due jobs are fired once per second
at most, and each callback is run through `spawn`; a callback taking more
than five seconds is logged as a warning.

`run_task(once=True)` performs a single scheduling step synchronously: it
runs the first job if it is due and reschedules it, or otherwise sleeps until
it is due. With `once=False` it loops until no jobs remain. Afterwards the
scheduler is not running, and the jobs stay scheduled.

## Example

After installing the package, run

```
cronkit-example
```

to start a scheduler with a job that fires every second and logs
`Cron job triggered! arg=Hello ESP-CRON`. It runs until Ctrl+C, or for a
given number of seconds with `--duration SECONDS`.

## What it does not do

Jobs live only in memory: there is no crontab file reading, no persistence
across restarts, and no daemon that runs shell commands. Jobs are Python
callbacks registered from your own code.