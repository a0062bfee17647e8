"""Example program: a job that logs a message every second."""

from __future__ import annotations

import argparse
import logging
import time

from cronkit.jobs import CronJob
from cronkit.scheduler import Scheduler

__all__ = ["main"]

MESSAGE = "Hello ESP-CRON"


def _callback(job: CronJob) -> None:
    logging.getLogger("callback").info("Cron job triggered! arg=%s", job.data)


def main(argv: list[str] | None = None) -> int:
    """Schedule a job every second and wait, forever or for ``--duration``."""
    parser = argparse.ArgumentParser(description="Run a cron job every second.")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to run before stopping (default: run until interrupted)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    scheduler = Scheduler()
    scheduler.create_job("* * * * * *", _callback, MESSAGE)
    scheduler.start()
    print("cron example started. Waiting for cron job...", flush=True)
    try:
        if args.duration is None:
            while True:
                time.sleep(1)
        else:
            time.sleep(args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())