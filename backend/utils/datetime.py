"""
Datetime utilities.

Timestamps are stored in UTC. Clients send ISO-8601 strings; responses show
wall-clock times in the organization's timezone (settings.TIME_ZONE).
"""
import calendar
from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo


def to_unix(dt: Optional[datetime]) -> Optional[int]:
    """
    Convert datetime to Unix timestamp (seconds).

    Args:
        dt: datetime object (naive assumed UTC, aware uses its tz)

    Returns:
        Unix timestamp in seconds, or None if dt is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return int(dt.timestamp())


def from_unix(ts: Optional[Union[int, float]]) -> Optional[datetime]:
    """Convert Unix timestamp to datetime (UTC)."""
    if ts is None:
        return None

    return datetime.fromtimestamp(ts, tz=timezone.utc)


def _parse_iso(value: str) -> Optional[datetime]:
    value = (value or '').strip()
    if not value:
        return None
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_client_time(value: Optional[str], fallback: datetime) -> datetime:
    """
    Client-observed clock time as an aware UTC datetime.

    Unparseable values fall back to server time; naive values are taken
    as UTC, the way browsers serialize Date.toISOString().
    """
    parsed = _parse_iso(value)
    if parsed is None:
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_admin_time(value: Optional[str], tz_name: str) -> Optional[datetime]:
    """
    Time entered on the admin screen.

    A naive value (datetime-local input, "YYYY-MM-DDTHH:MM") is wall-clock
    time in tz_name; values with an offset are honoured as given.
    """
    parsed = _parse_iso(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(tz_name))
    return parsed.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: str) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ZoneInfo(tz_name))


def local_time_str(dt: Optional[datetime], tz_name: str) -> str:
    """HH:MM:SS in tz_name, empty for None."""
    if dt is None:
        return ''
    return to_local(dt, tz_name).strftime('%H:%M:%S')


def local_date_str(dt: Optional[datetime], tz_name: str) -> str:
    """YYYY-MM-DD in tz_name, empty for None."""
    if dt is None:
        return ''
    return to_local(dt, tz_name).date().isoformat()


def local_day_bounds(day, tz_name: str):
    """UTC [start, end) of a calendar day in tz_name."""
    tz = ZoneInfo(tz_name)
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = datetime.fromordinal(day.toordinal() + 1).replace(tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def months_before(day: date, months: int) -> date:
    """Same day of the month, months earlier; clamped to that month's length."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))
