from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    """Loại sự kiện chấm công."""

    SIGN_IN = "sign-in"
    SIGN_OUT = "sign-out"


class MergeOutcome(str, Enum):
    """Kết quả khi đưa một sự kiện vào working set."""

    ACCEPTED = "ACCEPTED"
    DUPLICATE = "DUPLICATE"
    OUT_OF_SCOPE = "OUT_OF_SCOPE"
    MALFORMED = "MALFORMED"


class SortField(str, Enum):
    TIMESTAMP = "timestamp"
    EMPLOYEE_ID = "employeeId"


class QueryMode(str, Enum):
    RANGED = "ranged"
    PAGED = "paged"
    RECENT = "recent"


class QuickRange(Enum):
    """Quick-range presets, valued by how many days back the window starts."""

    TODAY = 0
    LAST_7_DAYS = 7
    LAST_30_DAYS = 30
    LAST_90_DAYS = 90


class ReportPeriod(str, Enum):
    """Report cards offered by the dashboard."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"

    @property
    def quick_range(self) -> QuickRange:
        return {
            ReportPeriod.DAILY: QuickRange.TODAY,
            ReportPeriod.WEEKLY: QuickRange.LAST_7_DAYS,
            ReportPeriod.MONTHLY: QuickRange.LAST_30_DAYS,
        }[self]


class ExportFormat(str, Enum):
    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"


class FieldSet(str, Enum):
    """Column set of an export; the value doubles as the filename tag."""

    DETAILED = "detailed"
    SUMMARY = "summary"


class NoticeState(str, Enum):
    IDLE = "IDLE"
    SHOWN = "SHOWN"
