"""Collaborator interfaces consumed by the worker."""

from datetime import datetime
from typing import Any, Iterable, Protocol, runtime_checkable

from .models import AttemptUpdate, DispatchResult, Job


@runtime_checkable
class Repository(Protocol):
    """Fetches jobs and records attempt outcomes."""

    def pending_jobs(self, max_retries: int, now: datetime) -> Iterable[Job[Any]]:
        """Return jobs whose retry count has not reached ``max_retries``.

        The result may still include jobs that are not yet due or are waiting
        out their backoff; the worker filters those. Must not mutate jobs.
        """
        ...

    def apply_attempt_result(self, job: Job[Any], update: AttemptUpdate) -> None:
        """Durably record ``update`` for ``job``. Raise on failure."""
        ...


@runtime_checkable
class Dispatcher(Protocol):
    """Performs the side effect for one job."""

    def attempt(self, job: Job[Any]) -> DispatchResult:
        """Run the job once.

        Raise :class:`~schedctl.errors.DispatchError` (optionally carrying a
        result) or any other exception to report a failed attempt. No retrying
        inside; the worker owns retry timing.
        """
        ...
