"""Shared fixtures and test doubles for schedctl tests."""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from schedctl.clock import FrozenClock
from schedctl.models import DispatchResult
from schedctl.worker import Worker, WorkerConfig


class FakeRepository:
    """Repository double that records every call."""

    def __init__(self, jobs=None, pending_error=None, apply_error=None):
        self.jobs = list(jobs or [])
        self.pending_error = pending_error
        self.apply_error = apply_error
        self.pending_calls = []
        self.updates = []
        self.applied_jobs = []

    def pending_jobs(self, max_retries, now):
        self.pending_calls.append((max_retries, now))
        if self.pending_error is not None:
            raise self.pending_error
        return list(self.jobs)

    def apply_attempt_result(self, job, update):
        self.applied_jobs.append(job)
        self.updates.append(update)
        if self.apply_error is not None:
            raise self.apply_error


class FakeDispatcher:
    """Dispatcher double returning queued results and raising queued errors."""

    def __init__(self, results=None, errors=None, on_attempt=None):
        self.results = list(results or [])
        self.errors = list(errors or [])
        self.on_attempt = on_attempt
        self.calls = []

    def attempt(self, job):
        self.calls.append(job)
        if self.on_attempt is not None:
            self.on_attempt(job)
        result = self.results.pop(0) if self.results else DispatchResult()
        error = self.errors.pop(0) if self.errors else None
        if error is not None:
            raise error
        return result


class CountingClock(FrozenClock):
    """Frozen clock that counts reads and moves forward after each one."""

    def __init__(self, now, step=timedelta(seconds=30)):
        super().__init__(now)
        self.step = step
        self.calls = 0

    def now(self):
        self.calls += 1
        current = super().now()
        self.advance(self.step)
        return current


@pytest.fixture
def now():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def logger():
    # Kept outside the "schedctl" hierarchy so caplog sees it regardless of
    # what configure_logging did to that logger.
    return logging.getLogger("tests.scheduler")


@pytest.fixture
def make_worker(now, logger):
    def _make_worker(repository, dispatcher, /, **overrides):
        options = dict(
            repository=repository,
            dispatcher=dispatcher,
            logger=logger,
            interval=timedelta(seconds=1),
            max_retries=5,
            success_status="sent",
            failure_status="failed",
            clock=FrozenClock(now),
        )
        options.update(overrides)
        return Worker(WorkerConfig(**options))

    return _make_worker
