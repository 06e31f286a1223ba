"""Organization-wide analytics over a date range.

Sign-ins are counted the same way as in the per-employee statistics: the
first sign-in of each employee-day, with hours taken from first-in and
first-out pairs the calculator accepts. The hourly distribution is the
exception and counts every event as recorded.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta, tzinfo
from typing import Iterable, Optional

from ..attendance.model import AttendanceEvent
from ..common.datetime_utils import local_date, working_days_between
from ..core.constants import TOP_PERFORMER_LIMIT, UNKNOWN_DEPARTMENT
from ..core.enums import EventType
from ..roster.model import Roster
from .aggregation import DayBucket, bucket_by_employee_day
from .calculator.base import WorkedHoursCalculator
from .calculator.standard_calculator import StandardWorkedHoursCalculator
from .model import (
    AnalyticsReport,
    DepartmentStats,
    HourlyPattern,
    LateArrivalTrend,
    TopPerformer,
    WeeklyTrend,
)


def _pair_hours(bucket: DayBucket, calculator: WorkedHoursCalculator) -> float:
    if bucket.sign_in is None or bucket.sign_out is None:
        return 0.0
    return calculator.pair_hours(bucket.sign_in, bucket.sign_out) or 0.0


def week_start(day: date) -> date:
    """The Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def compute_department_stats(
    events: Iterable[AttendanceEvent],
    *,
    roster: Roster,
    start: date,
    end: date,
    tz: Optional[tzinfo] = None,
    calculator: Optional[WorkedHoursCalculator] = None,
) -> list[DepartmentStats]:
    """One row per department, including roster departments with no activity.

    Employees missing from the roster or without a department fall under
    "Unknown".
    """

    calculator = calculator or StandardWorkedHoursCalculator()
    seen: dict[str, set[str]] = {}
    for entry in roster.employees():
        seen.setdefault(entry.department or UNKNOWN_DEPARTMENT, set())

    sign_ins: dict[str, int] = defaultdict(int)
    late: dict[str, int] = defaultdict(int)
    hours: dict[str, float] = defaultdict(float)
    for employee_id, days in bucket_by_employee_day(events, tz).items():
        dept = roster.department(employee_id) or UNKNOWN_DEPARTMENT
        seen.setdefault(dept, set()).add(employee_id)
        for bucket in days.values():
            if bucket.sign_in is not None:
                sign_ins[dept] += 1
                if bucket.sign_in.is_late:
                    late[dept] += 1
            hours[dept] += _pair_hours(bucket, calculator)

    working_days = working_days_between(start, end)
    return [
        DepartmentStats(
            department=dept,
            total_employees=len(employees),
            sign_ins=sign_ins[dept],
            late_arrivals=late[dept],
            total_hours=hours[dept],
            working_days=working_days,
        )
        for dept, employees in seen.items()
    ]


def compute_time_patterns(events: Iterable[AttendanceEvent], tz: Optional[tzinfo] = None) -> list[HourlyPattern]:
    check_ins = [0] * 24
    check_outs = [0] * 24
    for event in events:
        hour = event.timestamp.astimezone(tz).hour if tz else event.timestamp.hour
        if event.type == EventType.SIGN_IN:
            check_ins[hour] += 1
        else:
            check_outs[hour] += 1
    return [HourlyPattern(hour=h, check_ins=check_ins[h], check_outs=check_outs[h]) for h in range(24)]


def compute_late_arrival_trends(
    events: Iterable[AttendanceEvent], tz: Optional[tzinfo] = None
) -> list[LateArrivalTrend]:
    total: dict[date, int] = defaultdict(int)
    late: dict[date, int] = defaultdict(int)
    for days in bucket_by_employee_day(events, tz).values():
        for day, bucket in days.items():
            if bucket.sign_in is None:
                continue
            total[day] += 1
            if bucket.sign_in.is_late:
                late[day] += 1
    return [LateArrivalTrend(day=day, total_check_ins=total[day], late_count=late[day]) for day in sorted(total)]


def compute_weekly_trends(
    events: Iterable[AttendanceEvent],
    tz: Optional[tzinfo] = None,
    calculator: Optional[WorkedHoursCalculator] = None,
) -> list[WeeklyTrend]:
    calculator = calculator or StandardWorkedHoursCalculator()
    check_ins: dict[date, int] = defaultdict(int)
    late: dict[date, int] = defaultdict(int)
    hours: dict[date, float] = defaultdict(float)
    for days in bucket_by_employee_day(events, tz).values():
        for day, bucket in days.items():
            week = week_start(day)
            hours[week] += _pair_hours(bucket, calculator)
            if bucket.sign_in is not None:
                check_ins[week] += 1
                if bucket.sign_in.is_late:
                    late[week] += 1
    return [
        WeeklyTrend(week_start=week, check_ins=check_ins[week], late_check_ins=late[week], total_hours=hours[week])
        for week in sorted(hours)
    ]


def compute_top_performers(
    events: Iterable[AttendanceEvent],
    *,
    roster: Roster,
    start: date,
    end: date,
    tz: Optional[tzinfo] = None,
    calculator: Optional[WorkedHoursCalculator] = None,
    limit: int = TOP_PERFORMER_LIMIT,
) -> list[TopPerformer]:
    """Roster employees ranked by attendance rate plus punctuality rate."""

    calculator = calculator or StandardWorkedHoursCalculator()
    present: dict[str, set[date]] = defaultdict(set)
    late: dict[str, set[date]] = defaultdict(set)
    hours: dict[str, float] = defaultdict(float)
    entries = {}
    for employee_id, days in bucket_by_employee_day(events, tz).items():
        entry = roster.resolve(employee_id)
        if entry is None:
            continue
        # aliases of one employee share a row
        entries[entry.employee_id] = entry
        for day, bucket in days.items():
            hours[entry.employee_id] += _pair_hours(bucket, calculator)
            if bucket.sign_in is not None:
                present[entry.employee_id].add(day)
                if bucket.sign_in.is_late:
                    late[entry.employee_id].add(day)

    working_days = working_days_between(start, end)
    ranked = [
        TopPerformer(
            employee_id=key,
            employee_name=entry.name,
            department=entry.department,
            present_days=len(present[key]),
            late_days=len(late[key]),
            total_hours=hours[key],
            working_days=working_days,
        )
        for key, entry in entries.items()
    ]
    ranked.sort(key=lambda p: (-(p.attendance_rate + p.punctuality_rate), p.employee_id))
    return ranked[:limit]


def compute_analytics(
    events: Iterable[AttendanceEvent],
    *,
    roster: Roster,
    start: date,
    end: date,
    tz: Optional[tzinfo] = None,
    calculator: Optional[WorkedHoursCalculator] = None,
) -> AnalyticsReport:
    calculator = calculator or StandardWorkedHoursCalculator()
    in_range = [e for e in events if start <= local_date(e.timestamp, tz) <= end]
    return AnalyticsReport(
        start=start,
        end=end,
        departments=compute_department_stats(
            in_range, roster=roster, start=start, end=end, tz=tz, calculator=calculator
        ),
        hourly=compute_time_patterns(in_range, tz),
        late_arrivals=compute_late_arrival_trends(in_range, tz),
        weekly=compute_weekly_trends(in_range, tz, calculator),
        top_performers=compute_top_performers(
            in_range, roster=roster, start=start, end=end, tz=tz, calculator=calculator
        ),
    )
