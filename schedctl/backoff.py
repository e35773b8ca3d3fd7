"""Eligibility and status rules for scheduled jobs."""

from datetime import datetime, timedelta
from typing import Any, Optional

from .models import Job, to_utc

MAX_BACKOFF_SHIFT = 20


def backoff_window(interval: timedelta, retry_count: int) -> timedelta:
    """Minimum wait after the last attempt: interval * 2^min(retries, 20)."""
    shift = min(max(retry_count, 0), MAX_BACKOFF_SHIFT)
    return interval * (1 << shift)


def next_eligible_at(job: Job[Any], interval: timedelta) -> Optional[datetime]:
    """Earliest instant the job may run again, or None if it may run now.

    Raises OverflowError when the instant is past ``datetime.max``.
    """
    if job.never_attempted:
        return None
    return to_utc(job.last_attempted_at) + backoff_window(interval, job.retry_count)


def should_attempt(job: Job[Any], now: datetime, interval: timedelta) -> bool:
    now = to_utc(now)
    if job.scheduled_for is not None and now < to_utc(job.scheduled_for):
        return False
    try:
        eligible_at = next_eligible_at(job, interval)
    except OverflowError:
        return False
    return eligible_at is None or now >= eligible_at


def resolve_status(
    result_status: str,
    failed: bool,
    success_status: str,
    failure_status: str,
) -> str:
    """Pick the status to persist for an attempt.

    A dispatcher-supplied status wins even on failure. Otherwise the
    configured failure or success label applies, and an empty outcome falls
    back to the failure label.
    """
    status = result_status
    if not status:
        status = failure_status if failed else success_status
    if not status:
        status = failure_status
    return status
