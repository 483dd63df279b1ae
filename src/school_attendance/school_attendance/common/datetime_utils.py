from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..core.exceptions import ValidationError

_TIME_RE = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_time_of_day(value: str | time) -> time:
    """Accept HH:MM or HH:MM:SS and return a seconds-precision time."""
    if isinstance(value, time):
        return value.replace(microsecond=0)
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM or HH:MM:SS)")

    v = value.strip()
    if not _TIME_RE.match(v):
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM or HH:MM:SS)")
    if len(v) == 5:
        v = f"{v}:00"
    try:
        return datetime.strptime(v, "%H:%M:%S").time()
    except ValueError:
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM or HH:MM:SS)")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp (YYYY-MM-DDTHH:MM[:SS]) into a naive local datetime."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp {value!r} (expected YYYY-MM-DDTHH:MM:SS)")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid timestamp {value!r} (expected YYYY-MM-DDTHH:MM:SS)")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_time(value: time | None) -> str | None:
    return value.strftime("%H:%M:%S") if value is not None else None


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
