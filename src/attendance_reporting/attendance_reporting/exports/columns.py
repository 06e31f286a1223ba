from __future__ import annotations

from datetime import tzinfo
from typing import Any, Iterable, Optional

from ..attendance.model import AttendanceEvent
from ..common.datetime_utils import local_date
from ..core.enums import FieldSet
from ..reports.model import StatSummary, format_hours
from ..roster.model import Roster

DETAILED_COLUMNS = ["Employee ID", "Employee Name", "Date", "Type", "Timestamp", "Status", "Notes"]
SUMMARY_COLUMNS = [
    "Employee ID",
    "Employee Name",
    "Total Sign-Ins",
    "On Time",
    "Late",
    "Total Hours Worked",
    "Average Arrival Time",
    "Average Departure Time",
    "Attendance Days",
]


def columns_for(field_set: FieldSet) -> list[str]:
    return list(DETAILED_COLUMNS if field_set == FieldSet.DETAILED else SUMMARY_COLUMNS)


def cell(value: Any) -> str:
    """Missing values become empty cells in every format."""
    if value is None:
        return ""
    return str(value)


def detailed_row(event: AttendanceEvent, *, tz: Optional[tzinfo], roster: Roster) -> list[str]:
    moment = event.timestamp.astimezone(tz) if tz is not None else event.timestamp
    return [
        cell(event.employee_id),
        cell(roster.display_name(event.employee_id, event.employee_name)),
        local_date(event.timestamp, tz).isoformat(),
        event.type.value,
        moment.strftime("%H:%M:%S"),
        event.status_label,
        cell(event.notes),
    ]


def summary_row(stat: StatSummary) -> list[str]:
    return [
        cell(stat.employee_id),
        cell(stat.employee_name),
        str(stat.total_sign_ins),
        str(stat.on_time),
        str(stat.late),
        format_hours(stat.total_hours_worked),
        cell(stat.average_arrival_time),
        cell(stat.average_departure_time),
        str(stat.attendance_days),
    ]


def row_values(
    field_set: FieldSet,
    *,
    events: Iterable[AttendanceEvent] = (),
    stats: Iterable[StatSummary] = (),
    tz: Optional[tzinfo] = None,
    roster: Optional[Roster] = None,
) -> list[list[str]]:
    """Rows shared by every output format, in column order."""
    if field_set == FieldSet.DETAILED:
        roster = roster or Roster()
        return [detailed_row(e, tz=tz, roster=roster) for e in events]
    return [summary_row(s) for s in stats]
