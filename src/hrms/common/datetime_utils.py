from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def to_date(value, field_name: str = "date") -> date:
    """Accept a date, a datetime or an ISO string (date part only is kept)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    v = (value or "").strip() if isinstance(value, str) else ""
    if not v:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(v[:10])
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (expected YYYY-MM-DD)")


def to_datetime(value, *, on_date: Optional[date] = None, field_name: str = "time") -> Optional[datetime]:
    """Parse an optional timestamp.

    Accepts datetimes, ISO-8601 strings ("2026-02-01T09:20", "2026-02-01 09:20:00")
    or a bare "HH:MM" which is combined with ``on_date``. Blank values give None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    v = str(value).strip()
    if not v:
        return None

    if len(v) == 5 and on_date is not None:
        try:
            return datetime.combine(on_date, parse_hhmm(v))
        except ValueError:
            raise ValidationError(f"Invalid {field_name} (expected HH:MM)")

    if v.endswith("Z"):
        v = v[:-1]
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}")
    return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minute_of_day(value: datetime | time) -> int:
    """Wall-clock minute of the day; seconds are ignored."""
    return value.hour * 60 + value.minute


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def count_weekday(start: date, end: date, weekday: int) -> int:
    return sum(1 for d in iter_days(start, end) if d.weekday() == weekday)
