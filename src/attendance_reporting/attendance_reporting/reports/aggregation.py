"""Per-employee statistics derived from canonical attendance events.

Summaries are a pure function of the events passed in; nothing here keeps
state between calls.

Only the first sign-in and the first sign-out of each employee-day are
used (earliest, since events are ordered chronologically before
bucketing). Capture policy upstream is expected to allow one of each per
day; extra same-day events are ignored rather than summed.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable, Optional

from ..attendance.model import AttendanceEvent
from ..common.datetime_utils import local_date, minutes_of_day, working_days_between
from ..core.constants import OVERTIME_THRESHOLD_HOURS, TIME_SENTINEL
from ..core.enums import EventType
from ..roster.model import Roster
from .calculator.base import WorkedHoursCalculator
from .calculator.standard_calculator import StandardWorkedHoursCalculator
from .model import DailyOverview, PeriodStats, StatSummary


@dataclass
class DayBucket:
    sign_in: Optional[AttendanceEvent] = None
    sign_out: Optional[AttendanceEvent] = None


def format_clock(minutes: Optional[float]) -> str:
    if minutes is None:
        return TIME_SENTINEL
    total = int(round(minutes)) % (24 * 60)
    hours, mins = divmod(total, 60)
    return f"{hours:02d}:{mins:02d}"


def average_clock_time(events: Iterable[AttendanceEvent], tz: Optional[tzinfo] = None) -> str:
    minutes = [minutes_of_day(e.timestamp, tz) for e in events]
    if not minutes:
        return TIME_SENTINEL
    return format_clock(sum(minutes) / len(minutes))


def bucket_by_employee_day(
    events: Iterable[AttendanceEvent], tz: Optional[tzinfo] = None
) -> dict[str, dict[date, DayBucket]]:
    buckets: dict[str, dict[date, DayBucket]] = defaultdict(lambda: defaultdict(DayBucket))
    for event in sorted(events, key=lambda e: (e.timestamp, e.id)):
        bucket = buckets[event.employee_id][local_date(event.timestamp, tz)]
        if event.type == EventType.SIGN_IN and bucket.sign_in is None:
            bucket.sign_in = event
        elif event.type == EventType.SIGN_OUT and bucket.sign_out is None:
            bucket.sign_out = event
    return buckets


def compute_stats(
    events: Iterable[AttendanceEvent],
    *,
    tz: Optional[tzinfo] = None,
    roster: Optional[Roster] = None,
    organization_id: Optional[str] = None,
    calculator: Optional[WorkedHoursCalculator] = None,
) -> dict[str, StatSummary]:
    """Build a StatSummary per employee id.

    Pairs whose duration the calculator rejects (sign-out before sign-in,
    24h or longer) add nothing to the hours and are counted as anomalous.
    """

    calculator = calculator or StandardWorkedHoursCalculator()
    roster = roster or Roster()
    if organization_id is not None:
        events = [e for e in events if e.organization_id is None or e.organization_id == str(organization_id)]
    else:
        events = list(events)

    names: dict[str, str] = {}
    for event in events:
        if event.employee_name:
            names.setdefault(event.employee_id, event.employee_name)

    out: dict[str, StatSummary] = {}
    for employee_id, days in bucket_by_employee_day(events, tz).items():
        sign_ins: list[AttendanceEvent] = []
        sign_outs: list[AttendanceEvent] = []
        on_time = late = valid = anomalous = 0
        hours = 0.0
        dates: set[date] = set()

        for day, bucket in days.items():
            if bucket.sign_in is not None:
                sign_ins.append(bucket.sign_in)
                dates.add(day)
                if bucket.sign_in.is_late:
                    late += 1
                else:
                    on_time += 1
            if bucket.sign_out is not None:
                sign_outs.append(bucket.sign_out)
            if bucket.sign_in is not None and bucket.sign_out is not None:
                pair = calculator.pair_hours(bucket.sign_in, bucket.sign_out)
                if pair is None:
                    anomalous += 1
                else:
                    hours += pair
                    valid += 1

        entry = roster.resolve(employee_id)
        out[employee_id] = StatSummary(
            employee_id=employee_id,
            employee_name=roster.display_name(employee_id, names.get(employee_id)),
            department=entry.department if entry else None,
            total_sign_ins=len(sign_ins),
            on_time=on_time,
            late=late,
            total_hours_worked=hours,
            valid_pairs=valid,
            anomalous_pairs=anomalous,
            average_arrival_time=average_clock_time(sign_ins, tz),
            average_departure_time=average_clock_time(sign_outs, tz),
            attendance_dates=frozenset(dates),
        )
    return out


def compute_daily_overview(
    events: Iterable[AttendanceEvent],
    *,
    day: date,
    total_employees: int,
    tz: Optional[tzinfo] = None,
) -> DailyOverview:
    present = late = 0
    for days in bucket_by_employee_day(events, tz).values():
        bucket = days.get(day)
        if bucket is None or bucket.sign_in is None:
            continue
        present += 1
        if bucket.sign_in.is_late:
            late += 1
    return DailyOverview(
        day=day,
        total_employees=int(total_employees),
        present=present,
        late=late,
        absent=max(0, int(total_employees) - present),
    )


def compute_period_stats(
    events: Iterable[AttendanceEvent],
    *,
    start: date,
    end: date,
    tz: Optional[tzinfo] = None,
    calculator: Optional[WorkedHoursCalculator] = None,
    overtime_threshold_hours: float = OVERTIME_THRESHOLD_HOURS,
) -> PeriodStats:
    """Figures for one employee's events within [start, end]."""

    calculator = calculator or StandardWorkedHoursCalculator()
    in_period = [e for e in events if start <= local_date(e.timestamp, tz) <= end]

    present = late = 0
    total = overtime = 0.0
    sign_ins: list[AttendanceEvent] = []
    sign_outs: list[AttendanceEvent] = []
    for days in bucket_by_employee_day(in_period, tz).values():
        for bucket in days.values():
            present += 1
            if bucket.sign_in is not None:
                sign_ins.append(bucket.sign_in)
                if bucket.sign_in.is_late:
                    late += 1
            if bucket.sign_out is not None:
                sign_outs.append(bucket.sign_out)
            if bucket.sign_in is None or bucket.sign_out is None:
                continue
            pair = calculator.pair_hours(bucket.sign_in, bucket.sign_out)
            if pair is None:
                continue
            total += pair
            overtime += max(0.0, pair - overtime_threshold_hours)

    return PeriodStats(
        start=start,
        end=end,
        working_days=working_days_between(start, end),
        present_days=present,
        late_days=late,
        total_hours=total,
        overtime_hours=overtime,
        average_arrival_time=average_clock_time(sign_ins, tz),
        average_departure_time=average_clock_time(sign_outs, tz),
    )
