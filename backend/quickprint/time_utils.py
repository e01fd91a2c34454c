from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_timezone(name: str | None) -> tzinfo:
    """Resolve a timezone name; UTC does not need the tz database."""
    if not name or name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


def local_date_of(dt: datetime, tz: tzinfo) -> date:
    """Calendar day of a stored (naive UTC) timestamp in the shop's timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz).date()


def local_today(tz: tzinfo, now: Optional[datetime] = None) -> date:
    return local_date_of(now or utcnow(), tz)


def local_day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """
    Half-open [start, end) range of naive UTC datetimes covering a local day.
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string.

    - None / "" -> None
    - Raises ValueError for anything else that is not a calendar date
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"expected a YYYY-MM-DD string, got {type(value).__name__}")
    s = value.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
