"""Time sources."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from .models import to_utc


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Clock that only moves when told to. Useful with ``Worker.run_once``."""

    def __init__(self, now: Optional[datetime] = None):
        self._now = to_utc(now) if now is not None else datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = to_utc(now)

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
