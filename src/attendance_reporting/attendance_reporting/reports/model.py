from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.constants import TIME_SENTINEL


def format_hours(hours: float) -> str:
    """Two-decimal rendering; stored values keep full precision."""
    return f"{hours:.2f}"


def percent(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole else 0.0


@dataclass(frozen=True)
class StatSummary:
    """Per-employee statistics over an evaluated window of events."""

    employee_id: str
    employee_name: str
    total_sign_ins: int = 0
    on_time: int = 0
    late: int = 0
    total_hours_worked: float = 0.0
    valid_pairs: int = 0
    anomalous_pairs: int = 0
    average_arrival_time: str = TIME_SENTINEL
    average_departure_time: str = TIME_SENTINEL
    attendance_dates: frozenset[date] = field(default_factory=frozenset)
    department: Optional[str] = None

    @property
    def attendance_days(self) -> int:
        return len(self.attendance_dates)

    @property
    def average_hours_per_day(self) -> float:
        return self.total_hours_worked / self.valid_pairs if self.valid_pairs else 0.0

    @property
    def punctuality_rate(self) -> float:
        return percent(self.on_time, self.total_sign_ins)

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department or "",
            "totalSignIns": self.total_sign_ins,
            "onTime": self.on_time,
            "late": self.late,
            "totalHoursWorked": round(self.total_hours_worked, 2),
            "averageHoursPerDay": round(self.average_hours_per_day, 2),
            "averageArrivalTime": self.average_arrival_time,
            "averageDepartureTime": self.average_departure_time,
            "attendanceDays": self.attendance_days,
            "attendanceDates": sorted(d.isoformat() for d in self.attendance_dates),
            "punctualityRate": round(self.punctuality_rate),
        }


@dataclass(frozen=True)
class DailyOverview:
    """Dashboard snapshot for a single day."""

    day: date
    total_employees: int
    present: int
    late: int
    absent: int

    @property
    def attendance_rate(self) -> float:
        return percent(self.present, self.total_employees)

    @property
    def punctuality_rate(self) -> float:
        return percent(self.present - self.late, self.present) if self.present else 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "totalEmployees": self.total_employees,
            "presentEmployees": self.present,
            "lateEmployees": self.late,
            "absentEmployees": self.absent,
            "attendanceRate": round(self.attendance_rate),
            "punctualityRate": round(self.punctuality_rate),
        }


@dataclass(frozen=True)
class PeriodStats:
    """One employee's figures for a period such as a calendar month."""

    start: date
    end: date
    working_days: int
    present_days: int
    late_days: int
    total_hours: float
    overtime_hours: float
    average_arrival_time: str
    average_departure_time: str

    @property
    def attendance_rate(self) -> float:
        return percent(self.present_days, self.working_days)

    @property
    def punctuality_score(self) -> float:
        if not self.present_days:
            return 100.0
        return percent(self.present_days - self.late_days, self.present_days)

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "totalDays": self.working_days,
            "presentDays": self.present_days,
            "lateDays": self.late_days,
            "totalHours": round(self.total_hours, 2),
            "overtimeHours": round(self.overtime_hours, 2),
            "averageArrivalTime": self.average_arrival_time,
            "averageDepartureTime": self.average_departure_time,
            "attendanceRate": round(self.attendance_rate),
            "punctualityScore": round(self.punctuality_score),
        }


@dataclass(frozen=True)
class DepartmentStats:
    department: str
    total_employees: int
    sign_ins: int
    late_arrivals: int
    total_hours: float
    working_days: int

    @property
    def attendance_rate(self) -> float:
        if not self.sign_ins:
            return 0.0
        return percent(self.sign_ins, self.total_employees * self.working_days)

    @property
    def punctuality_rate(self) -> float:
        if not self.sign_ins:
            return 100.0
        return percent(self.sign_ins - self.late_arrivals, self.sign_ins)

    def to_dict(self) -> dict:
        return {
            "department": self.department,
            "totalEmployees": self.total_employees,
            "avgAttendanceRate": round(self.attendance_rate),
            "avgPunctualityRate": round(self.punctuality_rate),
            "totalHours": round(self.total_hours, 2),
            "lateArrivals": self.late_arrivals,
        }


@dataclass(frozen=True)
class HourlyPattern:
    hour: int
    check_ins: int = 0
    check_outs: int = 0

    def to_dict(self) -> dict:
        return {"hour": self.hour, "checkIns": self.check_ins, "checkOuts": self.check_outs}


@dataclass(frozen=True)
class LateArrivalTrend:
    day: date
    total_check_ins: int
    late_count: int

    @property
    def percentage(self) -> float:
        return percent(self.late_count, self.total_check_ins)

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "lateCount": self.late_count,
            "totalCheckIns": self.total_check_ins,
            "percentage": round(self.percentage),
        }


@dataclass(frozen=True)
class WeeklyTrend:
    """Figures for the week starting on `week_start` (a Sunday)."""

    week_start: date
    check_ins: int
    late_check_ins: int
    total_hours: float

    @property
    def punctuality(self) -> float:
        if not self.check_ins:
            return 100.0
        return percent(self.check_ins - self.late_check_ins, self.check_ins)

    @property
    def average_hours(self) -> float:
        return self.total_hours / max(self.check_ins, 1)

    def to_dict(self) -> dict:
        return {
            "week": self.week_start.isoformat(),
            "attendance": self.check_ins,
            "punctuality": round(self.punctuality),
            "avgHours": round(self.average_hours, 2),
        }


@dataclass(frozen=True)
class TopPerformer:
    employee_id: str
    employee_name: str
    present_days: int
    late_days: int
    total_hours: float
    working_days: int
    department: Optional[str] = None

    @property
    def attendance_rate(self) -> float:
        return percent(self.present_days, self.working_days)

    @property
    def punctuality_rate(self) -> float:
        if not self.present_days:
            return 100.0
        return percent(self.present_days - self.late_days, self.present_days)

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department or "",
            "attendanceRate": round(self.attendance_rate),
            "punctualityRate": round(self.punctuality_rate),
            "totalHours": round(self.total_hours, 2),
        }


@dataclass(frozen=True)
class AnalyticsReport:
    start: date
    end: date
    departments: list[DepartmentStats]
    hourly: list[HourlyPattern]
    late_arrivals: list[LateArrivalTrend]
    weekly: list[WeeklyTrend]
    top_performers: list[TopPerformer]

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "departmentStats": [d.to_dict() for d in self.departments],
            "timePatterns": [h.to_dict() for h in self.hourly],
            "lateArrivalTrends": [t.to_dict() for t in self.late_arrivals],
            "weeklyTrends": [w.to_dict() for w in self.weekly],
            "topPerformers": [p.to_dict() for p in self.top_performers],
        }
