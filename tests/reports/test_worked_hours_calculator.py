from datetime import datetime, timedelta, timezone

from src.attendance_reporting.attendance_reporting.attendance.model import AttendanceEvent
from src.attendance_reporting.attendance_reporting.core.enums import EventType
from src.attendance_reporting.attendance_reporting.reports.calculator.standard_calculator import (
    StandardWorkedHoursCalculator,
)

START = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


def pair(hours):
    sign_in = AttendanceEvent(id="i", employee_id="e1", type=EventType.SIGN_IN, timestamp=START)
    sign_out = AttendanceEvent(
        id="o", employee_id="e1", type=EventType.SIGN_OUT, timestamp=START + timedelta(hours=hours)
    )
    return sign_in, sign_out


def test_standard_calculator_accepts_normal_shift():
    calc = StandardWorkedHoursCalculator()
    assert calc.pair_hours(*pair(8.5)) == 8.5


def test_standard_calculator_rejects_anomalies():
    calc = StandardWorkedHoursCalculator()
    assert calc.pair_hours(*pair(0)) is None
    assert calc.pair_hours(*pair(-1)) is None
    assert calc.pair_hours(*pair(24)) is None
