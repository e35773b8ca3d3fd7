"""Worker loop that dispatches due jobs with exponential backoff."""

import logging
import math
import signal
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, List, Optional, Union

from . import backoff
from .clock import Clock, SystemClock
from .errors import (
    DispatchError,
    InvalidIntervalError,
    InvalidMaxRetriesError,
    MissingDispatcherError,
    MissingFailureStatusError,
    MissingLoggerError,
    MissingRepositoryError,
    MissingSuccessStatusError,
)
from .models import AttemptUpdate, DispatchResult, Job, to_utc
from .ports import Dispatcher, Repository
from .settings import SchedulerSettings

MAX_WAIT_SECONDS = 3600.0


@dataclass
class WorkerConfig:
    """Inputs required to construct a :class:`Worker`."""

    repository: Optional[Repository] = None
    dispatcher: Optional[Dispatcher] = None
    logger: Optional[logging.Logger] = None
    interval: Union[timedelta, float, None] = None  # seconds when numeric
    max_retries: int = 0
    success_status: str = ""
    failure_status: str = ""
    clock: Optional[Clock] = None


@dataclass
class AttemptOutcome:
    """What happened to one eligible job."""

    job_id: str
    update: AttemptUpdate
    dispatch_error: Optional[BaseException] = None
    persist_error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.dispatch_error is None


@dataclass
class CycleReport:
    """Summary of one scheduling cycle."""

    fetched: int = 0
    skipped: int = 0
    outcomes: List[AttemptOutcome] = field(default_factory=list)
    cancelled: bool = False
    fetch_failed: bool = False

    @property
    def dispatched(self) -> int:
        return len(self.outcomes)

    @property
    def dispatch_failures(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)

    @property
    def persist_failures(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.persist_error is not None)


def _as_interval(value: Union[timedelta, float, None]) -> timedelta:
    if value is None:
        raise InvalidIntervalError()
    if isinstance(value, timedelta):
        interval = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        try:
            interval = timedelta(seconds=value)
        except OverflowError:
            raise InvalidIntervalError() from None
    else:
        raise InvalidIntervalError()
    if interval <= timedelta(0):
        raise InvalidIntervalError()
    return interval


def _wait_until(stop_event: threading.Event, deadline: float) -> bool:
    """Sleep until the monotonic ``deadline``. Return True if stopped first."""
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return stop_event.is_set()
        # Event.wait overflows on very large timeouts.
        if stop_event.wait(min(remaining, MAX_WAIT_SECONDS)):
            return True


class Worker:
    """Periodically attempts pending jobs and records the outcome."""

    def __init__(self, config: WorkerConfig):
        if config.repository is None:
            raise MissingRepositoryError()
        if config.dispatcher is None:
            raise MissingDispatcherError()
        if config.logger is None:
            raise MissingLoggerError()
        interval = _as_interval(config.interval)
        if not config.max_retries or config.max_retries <= 0:
            raise InvalidMaxRetriesError()
        if not config.success_status:
            raise MissingSuccessStatusError()
        if not config.failure_status:
            raise MissingFailureStatusError()

        self.repository = config.repository
        self.dispatcher = config.dispatcher
        self.logger = config.logger
        self.interval = interval
        self.max_retries = config.max_retries
        self.success_status = config.success_status
        self.failure_status = config.failure_status
        self.clock = config.clock or SystemClock()

    @classmethod
    def from_settings(
        cls,
        settings: SchedulerSettings,
        repository: Repository,
        dispatcher: Dispatcher,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Clock] = None,
    ) -> "Worker":
        return cls(
            WorkerConfig(
                repository=repository,
                dispatcher=dispatcher,
                logger=logger or logging.getLogger("schedctl.worker"),
                interval=settings.interval,
                max_retries=settings.max_retries,
                success_status=settings.success_status,
                failure_status=settings.failure_status,
                clock=clock,
            )
        )

    def run(self, stop_event: threading.Event) -> None:
        """Run cycles on every tick until ``stop_event`` is set.

        Ticks are anchored to the start time, so slow cycles do not push later
        ticks back. Ticks missed while a cycle overran are dropped.
        """
        period = self.interval.total_seconds()
        self.logger.info(
            "scheduler_worker_started",
            extra={"interval": period, "max_retries": self.max_retries},
        )
        next_tick = time.monotonic() + period
        while not _wait_until(stop_event, next_tick):
            try:
                self.run_cycle(stop_event)
            except Exception as e:
                self.logger.error("scheduler_cycle_error", extra={"error": str(e)}, exc_info=e)
            next_tick += period
            behind = time.monotonic() - next_tick
            if behind > 0:
                next_tick += (int(behind // period) + 1) * period
        self.logger.info("scheduler_worker_stopped")

    def run_once(self, stop_event: Optional[threading.Event] = None) -> CycleReport:
        """Run a single cycle synchronously."""
        return self.run_cycle(stop_event)

    def run_cycle(self, stop_event: Optional[threading.Event] = None) -> CycleReport:
        report = CycleReport()
        if stop_event is not None and stop_event.is_set():
            report.cancelled = True
            return report

        # One snapshot of time for every job in the cycle.
        now = to_utc(self.clock.now())
        try:
            jobs = list(self.repository.pending_jobs(self.max_retries, now))
        except Exception as e:
            self.logger.error("scheduler_pending_jobs_error", extra={"error": str(e)}, exc_info=e)
            report.fetch_failed = True
            return report

        report.fetched = len(jobs)
        for job in jobs:
            if stop_event is not None and stop_event.is_set():
                report.cancelled = True
                break
            if not self.should_attempt(job, now):
                report.skipped += 1
                continue
            report.outcomes.append(self.execute_job(job, now))
        return report

    def should_attempt(self, job: Job[Any], now: datetime) -> bool:
        return backoff.should_attempt(job, now, self.interval)

    def execute_job(self, job: Job[Any], now: datetime) -> AttemptOutcome:
        """Dispatch one job and persist the attempt."""
        attempted_at = to_utc(now)
        result = DispatchResult()
        dispatch_error = None
        try:
            result = self.dispatcher.attempt(job) or DispatchResult()
        except DispatchError as e:
            result, dispatch_error = e.result, e
        except Exception as e:
            dispatch_error = e

        status = backoff.resolve_status(
            result.status,
            dispatch_error is not None,
            self.success_status,
            self.failure_status,
        )
        update = AttemptUpdate(
            status=status,
            provider_message_id=result.provider_message_id,
            retry_count=job.retry_count + 1,
            last_attempted_at=attempted_at,
        )
        outcome = AttemptOutcome(job_id=job.id, update=update, dispatch_error=dispatch_error)

        try:
            self.repository.apply_attempt_result(job, update)
        except Exception as e:
            outcome.persist_error = e
            self.logger.error(
                "scheduler_apply_attempt_error",
                extra={"job_id": job.id, "error": str(e)},
                exc_info=e,
            )

        if dispatch_error is not None:
            self.logger.error(
                "scheduler_dispatch_error",
                extra={"job_id": job.id, "status": status, "error": str(dispatch_error)},
            )
            return outcome

        self.logger.info("scheduler_dispatch_success", extra={"job_id": job.id, "status": status})
        return outcome


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set ``stop_event`` on SIGINT/SIGTERM so the current job can finish."""

    def _handle_shutdown(signum, frame):
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle_shutdown)
    signal.signal(signal.SIGINT, _handle_shutdown)
