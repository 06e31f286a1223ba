from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from src.attendance_reporting.attendance_reporting.attendance.model import AttendanceEvent
from src.attendance_reporting.attendance_reporting.core.enums import EventType
from src.attendance_reporting.attendance_reporting.reports.aggregation import (
    compute_daily_overview,
    compute_period_stats,
    compute_stats,
    format_clock,
)
from src.attendance_reporting.attendance_reporting.roster.model import Roster

UTC = timezone.utc


def ev(event_id, employee_id, type_, when, *, late=False, org="org1", name=None):
    return AttendanceEvent(
        id=event_id,
        employee_id=employee_id,
        type=type_,
        timestamp=when,
        is_late=late,
        organization_id=org,
        employee_name=name,
    )


def at(day, hour, minute=0):
    return datetime(2025, 3, day, hour, minute, tzinfo=UTC)


def test_single_late_day_summary():
    events = [
        ev("1", "e1", EventType.SIGN_IN, at(10, 9, 10), late=True),
        ev("2", "e1", EventType.SIGN_OUT, at(10, 17, 5)),
    ]

    stats = compute_stats(events, tz=UTC, organization_id="org1")["e1"]

    assert stats.total_sign_ins == 1
    assert stats.on_time == 0
    assert stats.late == 1
    assert round(stats.total_hours_worked, 2) == 7.92
    assert stats.to_dict()["totalHoursWorked"] == 7.92
    assert stats.attendance_days == 1
    assert stats.average_arrival_time == "09:10"
    assert stats.average_departure_time == "17:05"
    assert stats.employee_name == "Unknown"


def test_anomalous_pairs_add_no_hours():
    events = [
        # sign-out before sign-in
        ev("1", "e1", EventType.SIGN_IN, at(10, 18)),
        ev("2", "e1", EventType.SIGN_OUT, at(10, 8)),
        # normal day
        ev("3", "e1", EventType.SIGN_IN, at(11, 9)),
        ev("4", "e1", EventType.SIGN_OUT, at(11, 17)),
    ]

    stats = compute_stats(events, tz=UTC)["e1"]

    assert stats.total_hours_worked == 8.0
    assert stats.valid_pairs == 1
    assert stats.anomalous_pairs == 1
    assert stats.average_hours_per_day == 8.0
    assert stats.attendance_days == 2


def test_first_sign_in_of_the_day_wins():
    events = [
        ev("late", "e1", EventType.SIGN_IN, at(10, 13), late=True),
        ev("early", "e1", EventType.SIGN_IN, at(10, 9)),
        ev("out", "e1", EventType.SIGN_OUT, at(10, 17)),
    ]

    stats = compute_stats(events, tz=UTC)["e1"]

    assert stats.total_sign_ins == 1
    assert stats.on_time == 1
    assert stats.total_hours_worked == 8.0


def test_sign_out_without_sign_in_counts_no_attendance_day():
    stats = compute_stats([ev("1", "e1", EventType.SIGN_OUT, at(10, 17))], tz=UTC)["e1"]

    assert stats.total_sign_ins == 0
    assert stats.attendance_days == 0
    assert stats.average_arrival_time == "N/A"
    assert stats.average_departure_time == "17:00"
    assert stats.punctuality_rate == 0.0


def test_names_come_from_roster_then_event_then_unknown():
    roster = Roster.from_employees([{"id": "e1", "name": "Ada", "department": "R&D"}])
    events = [
        ev("1", "e1", EventType.SIGN_IN, at(10, 9), name="ignored"),
        ev("2", "e2", EventType.SIGN_IN, at(10, 9), name="Bob"),
        ev("3", "e3", EventType.SIGN_IN, at(10, 9)),
    ]

    stats = compute_stats(events, tz=UTC, roster=roster)

    assert stats["e1"].employee_name == "Ada"
    assert stats["e1"].department == "R&D"
    assert stats["e2"].employee_name == "Bob"
    assert stats["e3"].employee_name == "Unknown"


def test_events_of_other_organizations_are_excluded():
    events = [
        ev("1", "e1", EventType.SIGN_IN, at(10, 9)),
        ev("2", "e2", EventType.SIGN_IN, at(10, 9), org="org2"),
    ]

    assert set(compute_stats(events, tz=UTC, organization_id="org1")) == {"e1"}


def test_days_are_split_in_the_viewer_timezone():
    plus_ten = timezone(timedelta(hours=10))
    events = [
        # 2025-03-10 23:30 UTC is already 2025-03-11 in UTC+10
        ev("1", "e1", EventType.SIGN_IN, at(10, 23, 30)),
        ev("2", "e1", EventType.SIGN_IN, at(11, 1, 0)),
    ]

    assert compute_stats(events, tz=UTC)["e1"].attendance_days == 2
    assert compute_stats(events, tz=plus_ten)["e1"].attendance_days == 1


def test_summaries_are_pure_functions_of_input():
    events = [ev("1", "e1", EventType.SIGN_IN, at(10, 9)), ev("2", "e1", EventType.SIGN_OUT, at(10, 17))]

    assert compute_stats(events, tz=UTC) == compute_stats(list(reversed(events)), tz=UTC)


def test_daily_overview():
    events = [
        ev("1", "e1", EventType.SIGN_IN, at(10, 9)),
        ev("2", "e2", EventType.SIGN_IN, at(10, 9, 30), late=True),
        ev("3", "e3", EventType.SIGN_IN, at(9, 9)),
    ]

    overview = compute_daily_overview(events, day=date(2025, 3, 10), total_employees=4, tz=UTC)

    assert (overview.present, overview.late, overview.absent) == (2, 1, 2)
    assert overview.attendance_rate == 50.0
    assert overview.to_dict()["punctualityRate"] == 50


def test_period_stats_for_a_month():
    events = [
        ev("1", "e1", EventType.SIGN_IN, at(3, 8)),
        ev("2", "e1", EventType.SIGN_OUT, at(3, 18)),
        ev("3", "e1", EventType.SIGN_IN, at(4, 9), late=True),
        ev("4", "e1", EventType.SIGN_OUT, at(4, 17)),
        ev("5", "e1", EventType.SIGN_IN, datetime(2025, 4, 1, 9, tzinfo=UTC)),
    ]

    stats = compute_period_stats(events, start=date(2025, 3, 1), end=date(2025, 3, 31), tz=UTC)

    assert stats.working_days == 21
    assert stats.present_days == 2
    assert stats.late_days == 1
    assert stats.total_hours == 18.0
    assert stats.overtime_hours == 2.0
    assert stats.average_arrival_time == "08:30"
    assert stats.punctuality_score == 50.0


def test_period_without_attendance():
    stats = compute_period_stats([], start=date(2025, 3, 1), end=date(2025, 3, 31), tz=UTC)

    assert stats.attendance_rate == 0.0
    assert stats.punctuality_score == 100.0
    assert stats.average_arrival_time == "N/A"


def test_format_clock():
    assert format_clock(None) == "N/A"
    assert format_clock(9 * 60 + 5) == "09:05"
