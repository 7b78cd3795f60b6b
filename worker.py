#!/usr/bin/env python3
"""
Wallet sync worker.

Syncs every active wallet on a fixed interval (the next cycle is scheduled after
the previous one completes, so cycles never overlap) and prunes old rows once a
day at a fixed local time. Runs until SIGINT/SIGTERM.

Usage:
    python worker.py              # run the scheduler
    python worker.py --migrate    # apply database migrations first
"""

import logging
import signal
import sys
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import config
from log_config import setup_logging
from data_ingestion.sync_all_wallets import sync_all_wallets
from data_processing.prune_old_data import prune_old_data

logger = logging.getLogger(__name__)


def seconds_until_daily(hour: int, minute: int, now: Optional[datetime] = None) -> float:
    """Seconds from `now` until the next occurrence of HH:MM (local time)."""
    now = now or datetime.now()
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class ScheduledJob(ABC):
    """
    A periodic job owning a single daemon thread.

    The thread waits on the shared stop event between runs, so setting the event
    stops scheduling immediately; a run already in progress is not interrupted.
    """

    def __init__(self, name: str, func: Callable[[], object], stop_event: threading.Event,
                 run_immediately: bool = False):
        self.name = name
        self.func = func
        self.run_immediately = run_immediately
        self.runs = 0
        self._stop_event = stop_event
        self._thread: Optional[threading.Thread] = None
        self._in_flight = threading.Event()

    @abstractmethod
    def next_delay(self) -> float:
        """Seconds to wait before the next run."""

    @property
    def in_flight(self) -> bool:
        return self._in_flight.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Job {self.name} already started")
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the thread to exit; True if it did within the timeout."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _loop(self) -> None:
        if self.run_immediately and not self._stop_event.is_set():
            self._run_once()
        while not self._stop_event.wait(self.next_delay()):
            self._run_once()
        logger.info(f"Job {self.name} stopped")

    def _run_once(self) -> None:
        self._in_flight.set()
        started = time.monotonic()
        try:
            self.func()
        except Exception as e:
            logger.exception(f"Job {self.name} failed: {e}")
        else:
            logger.info(f"Job {self.name} finished in {time.monotonic() - started:.1f}s")
        finally:
            self.runs += 1
            self._in_flight.clear()


class IntervalJob(ScheduledJob):
    """Runs, then waits `interval` seconds after completion before the next run."""

    def __init__(self, name, func, interval: float, stop_event, run_immediately=False):
        super().__init__(name, func, stop_event, run_immediately=run_immediately)
        self.interval = interval

    def next_delay(self) -> float:
        return self.interval


class DailyJob(ScheduledJob):
    """Runs once a day at HH:MM local time."""

    def __init__(self, name, func, hour: int, minute: int, stop_event):
        super().__init__(name, func, stop_event)
        self.hour = hour
        self.minute = minute

    def next_delay(self) -> float:
        return seconds_until_daily(self.hour, self.minute)


class WalletSyncWorker:
    """Owns the sync and prune jobs for the life of the process."""

    def __init__(
        self,
        sync_func: Callable[[], object] = sync_all_wallets,
        prune_func: Callable[[], object] = prune_old_data,
        sync_interval: float = config.SYNC_INTERVAL_SECONDS,
        prune_hour: int = config.PRUNE_HOUR,
        prune_minute: int = config.PRUNE_MINUTE,
        grace_seconds: float = config.SHUTDOWN_GRACE_SECONDS,
        sync_on_startup: bool = config.SYNC_ON_STARTUP,
    ):
        self.stop_event = threading.Event()
        self.grace_seconds = grace_seconds
        self.sync_job = IntervalJob(
            "wallet-sync", sync_func, sync_interval, self.stop_event,
            run_immediately=sync_on_startup,
        )
        self.prune_job = DailyJob("retention-prune", prune_func, prune_hour, prune_minute, self.stop_event)
        self._started = False

    @property
    def jobs(self) -> List[ScheduledJob]:
        return [self.sync_job, self.prune_job]

    def start(self) -> None:
        if self._started:
            return
        for job in self.jobs:
            job.start()
        self._started = True
        logger.info(
            f"Data ingestion worker started - syncing every {self.sync_job.interval:g} seconds, "
            f"pruning daily at {self.prune_job.hour:02d}:{self.prune_job.minute:02d}"
        )

    def request_stop(self, sig=None, frame=None) -> None:
        if sig is not None:
            logger.info(f"Received signal {sig}, shutting down...")
        self.stop_event.set()

    def shutdown(self) -> bool:
        """
        Stop scheduling and give in-flight runs at most grace_seconds in total to finish.
        Returns True if every job thread exited in time.
        """
        self.stop_event.set()
        deadline = time.monotonic() + self.grace_seconds
        finished = True
        for job in self.jobs:
            remaining = max(0.0, deadline - time.monotonic())
            if not job.join(remaining):
                finished = False
                logger.warning(f"Job {job.name} still running after grace period; exiting anyway")
        logger.info("Data ingestion worker shut down")
        return finished

    def run(self) -> None:
        """Install signal handlers, start both jobs and block until told to stop."""
        signal.signal(signal.SIGINT, self.request_stop)
        signal.signal(signal.SIGTERM, self.request_stop)

        self.start()
        while not self.stop_event.wait(1):
            pass
        self.shutdown()


def main():
    setup_logging()

    if "--migrate" in sys.argv:
        from database.db_utils import apply_migrations
        apply_migrations()

    WalletSyncWorker().run()


if __name__ == "__main__":
    main()
