"""Exceptions raised by the scheduler."""

from typing import Optional

from .models import DispatchResult


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class InvalidConfigError(SchedulerError, ValueError):
    """Worker configuration failed validation."""

    field = ""
    reason = "is invalid"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or f"invalid scheduler config: {self.field} {self.reason}")


class MissingRepositoryError(InvalidConfigError):
    field = "repository"
    reason = "is required"


class MissingDispatcherError(InvalidConfigError):
    field = "dispatcher"
    reason = "is required"


class MissingLoggerError(InvalidConfigError):
    field = "logger"
    reason = "is required"


class InvalidIntervalError(InvalidConfigError):
    field = "interval"
    reason = "must be positive"


class InvalidMaxRetriesError(InvalidConfigError):
    field = "max_retries"
    reason = "must be positive"


class MissingSuccessStatusError(InvalidConfigError):
    field = "success_status"
    reason = "is required"


class MissingFailureStatusError(InvalidConfigError):
    field = "failure_status"
    reason = "is required"


class DispatchError(SchedulerError):
    """A dispatch attempt failed.

    Dispatchers that learned something before failing (a provider message id,
    an explicit status) attach it as ``result``; the worker still persists it.
    """

    def __init__(self, message: str, result: Optional[DispatchResult] = None):
        super().__init__(message)
        self.result = result or DispatchResult()
