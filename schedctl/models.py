"""Data models shared by the worker and its collaborators."""

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field, field_validator

PayloadT = TypeVar("PayloadT")


def to_utc(value: datetime) -> datetime:
    """Normalize a timestamp to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Job(BaseModel, Generic[PayloadT]):
    """Read-only snapshot of a job handed out by a repository."""

    model_config = ConfigDict(frozen=True)

    id: str
    scheduled_for: Optional[datetime] = None
    retry_count: int = Field(default=0, ge=0)
    last_attempted_at: Optional[datetime] = None
    payload: Optional[PayloadT] = None

    @field_validator("scheduled_for", "last_attempted_at")
    @classmethod
    def normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return to_utc(value)

    @property
    def never_attempted(self) -> bool:
        return self.retry_count <= 0 or self.last_attempted_at is None


class DispatchResult(BaseModel):
    """Metadata a dispatcher reports for one attempt."""

    model_config = ConfigDict(frozen=True)

    status: str = ""  # empty lets the worker decide
    provider_message_id: str = ""


class AttemptUpdate(BaseModel):
    """Mutation a repository must persist after an attempt."""

    model_config = ConfigDict(frozen=True)

    status: str
    provider_message_id: str = ""
    retry_count: int = Field(ge=1)
    last_attempted_at: datetime

    @field_validator("last_attempted_at")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        return to_utc(value)
