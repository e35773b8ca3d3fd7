"""In-memory job storage implementing the repository interface."""

import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from pydantic import BaseModel, ConfigDict

from .models import AttemptUpdate, Job


class JobRecord(BaseModel):
    """A stored job plus the outcome of its latest attempt."""

    model_config = ConfigDict(frozen=True)

    job: Job
    status: Optional[str] = None
    provider_message_id: str = ""


class MemoryStorage:
    """Insertion-ordered job store kept in process memory.

    Jobs whose latest status is in ``completed_statuses`` are no longer
    offered by :meth:`pending_jobs`. Nothing survives the process.
    """

    def __init__(self, jobs: Iterable[Job[Any]] = (), completed_statuses: Iterable[str] = ()):
        self.completed_statuses = frozenset(completed_statuses)
        self._records: Dict[str, JobRecord] = {}
        self._lock = threading.Lock()
        for job in jobs:
            self.add_job(job)

    def add_job(self, job: Job[Any]) -> None:
        """Add a new job."""
        with self._lock:
            if job.id in self._records:
                raise ValueError(f"Job {job.id} already exists")
            self._records[job.id] = JobRecord(job=job)

    def get_job(self, job_id: str) -> Optional[Job[Any]]:
        record = self._records.get(job_id)
        return record.job if record else None

    def get_record(self, job_id: str) -> Optional[JobRecord]:
        return self._records.get(job_id)

    def get_all_records(self) -> List[JobRecord]:
        with self._lock:
            return list(self._records.values())

    def pending_jobs(self, max_retries: int, now: datetime) -> List[Job[Any]]:
        """Jobs with retries left that have not reached a completed status."""
        with self._lock:
            return [
                record.job
                for record in self._records.values()
                if record.job.retry_count < max_retries
                and record.status not in self.completed_statuses
            ]

    def apply_attempt_result(self, job: Job[Any], update: AttemptUpdate) -> None:
        with self._lock:
            record = self._records.get(job.id)
            if record is None:
                raise KeyError(f"Job {job.id} not found")
            advanced = record.job.model_copy(
                update={
                    "retry_count": update.retry_count,
                    "last_attempted_at": update.last_attempted_at,
                }
            )
            self._records[job.id] = JobRecord(
                job=advanced,
                status=update.status,
                provider_message_id=update.provider_message_id,
            )

    def get_stats(self, max_retries: int) -> Dict[str, int]:
        """Count all, still pending, and retry-exhausted jobs."""
        stats = {"total": 0, "pending": 0, "exhausted": 0}
        for record in self.get_all_records():
            stats["total"] += 1
            if record.status in self.completed_statuses:
                continue
            if record.job.retry_count >= max_retries:
                stats["exhausted"] += 1
            else:
                stats["pending"] += 1
        return stats

    def status_counts(self) -> Dict[str, int]:
        """Count attempted jobs by latest status."""
        counts: Dict[str, int] = {}
        for record in self.get_all_records():
            if record.status is not None:
                counts[record.status] = counts.get(record.status, 0) + 1
        return counts
