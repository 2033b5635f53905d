"""
Clock abstraction for time operations.

Both the server (business-day checks) and the offline client (queue ids,
cache freshness) read time through a Clock so tests can pin it.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass

    def now_unix(self) -> int:
        """Get current time as Unix timestamp."""
        return int(self.now().timestamp())

    def now_ts(self) -> float:
        """Get current time as fractional Unix timestamp."""
        return self.now().timestamp()

    def local_date(self, tz_name: str) -> date:
        """Calendar date in the given IANA timezone (the business day)."""
        return self.now().astimezone(ZoneInfo(tz_name)).date()


class SystemClock(Clock):
    """Real system clock implementation."""

    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)


class FakeClock(Clock):
    """
    Fake clock for testing.
    Time can be set and advanced manually.
    """

    def __init__(self, initial: datetime = None):
        if initial is None:
            initial = datetime(2024, 1, 15, 3, 0, 0, tzinfo=timezone.utc)
        self._current = initial

    def now(self) -> datetime:
        return self._current

    def set(self, dt: datetime) -> None:
        """Set current time."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        self._current = dt

    def advance_seconds(self, seconds: float) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_minutes(self, minutes: int) -> None:
        self.advance_seconds(minutes * 60)

    def advance_hours(self, hours: int) -> None:
        self.advance_seconds(hours * 3600)

    def advance_days(self, days: int) -> None:
        self.advance_seconds(days * 86400)
