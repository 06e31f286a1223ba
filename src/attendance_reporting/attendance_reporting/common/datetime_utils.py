from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError

END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def parse_month(value: str) -> tuple[date, date]:
    """Parse YYYY-MM into the first and last day of that month."""
    try:
        first = datetime.strptime(value, "%Y-%m").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid month: {value!r}") from exc
    next_month = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    return first, next_month - timedelta(days=1)


def get_timezone(name: Optional[str]) -> tzinfo:
    if not name:
        return local_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone: {name!r}") from exc


def local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current time as an aware datetime.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz or local_timezone())


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    """Last instant of the day at millisecond precision (23:59:59.999)."""
    return datetime.combine(day, END_OF_DAY, tzinfo=tz)


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    return moment.astimezone(tz).date() if tz else moment.date()


def minutes_of_day(moment: datetime, tz: Optional[tzinfo] = None) -> int:
    local = moment.astimezone(tz) if tz else moment
    return local.hour * 60 + local.minute


def working_days_between(start: date, end: date) -> int:
    """Count Monday-Friday dates in [start, end]."""
    count = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count
