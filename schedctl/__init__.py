"""Retry-aware job scheduling worker."""

from .backoff import backoff_window, resolve_status, should_attempt
from .clock import Clock, FrozenClock, SystemClock
from .errors import DispatchError, InvalidConfigError, SchedulerError
from .models import AttemptUpdate, DispatchResult, Job
from .ports import Dispatcher, Repository
from .worker import CycleReport, Worker, WorkerConfig

__all__ = [
    "AttemptUpdate",
    "Clock",
    "CycleReport",
    "DispatchError",
    "DispatchResult",
    "Dispatcher",
    "FrozenClock",
    "InvalidConfigError",
    "Job",
    "Repository",
    "SchedulerError",
    "SystemClock",
    "Worker",
    "WorkerConfig",
    "backoff_window",
    "resolve_status",
    "should_attempt",
]
