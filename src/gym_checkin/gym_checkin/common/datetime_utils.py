from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_instant(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime as sent by the backend or QR codes.

    Accepts a trailing ``Z``. Date-only strings become midnight. Returns None
    for empty input and raises ValueError for garbage.
    """
    if value is None:
        return None
    v = str(value).strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    if len(v) == 10:
        return datetime.combine(parse_iso_date(v), datetime.min.time())
    return datetime.fromisoformat(v)


def to_local_naive(value: datetime) -> datetime:
    """Drop tz info after converting to local time so naive/aware values compare."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def calendar_days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative when end is earlier)."""
    if isinstance(start, datetime):
        start = to_local_naive(start).date()
    if isinstance(end, datetime):
        end = to_local_naive(end).date()
    return (end - start).days


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
