from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..attendance.model import AttendanceEvent
from ..attendance.query import WindowedQueryController, WindowResult, quick_range_bounds
from ..common.datetime_utils import now_local
from ..core.constants import ANALYTICS_DEFAULT_DAYS
from ..core.enums import QuickRange
from ..core.exceptions import ValidationError
from ..roster.model import OrganizationContext
from .aggregation import compute_daily_overview, compute_period_stats, compute_stats
from .analytics import compute_analytics
from .calculator.base import WorkedHoursCalculator
from .calculator.standard_calculator import StandardWorkedHoursCalculator
from .model import AnalyticsReport, DailyOverview, PeriodStats, StatSummary


@dataclass(frozen=True)
class ReportData:
    events: list[AttendanceEvent]
    summaries: list[StatSummary]
    used_fallback: bool = False


class AttendanceReportService:
    """Fetch a window of events for one organization and summarize it."""

    def __init__(
        self,
        query: WindowedQueryController,
        *,
        calculator: Optional[WorkedHoursCalculator] = None,
    ):
        self._query = query
        self._calculator = calculator or StandardWorkedHoursCalculator()

    @property
    def context(self) -> OrganizationContext:
        return self._query.context

    def load_events(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        preset: Optional[QuickRange] = None,
        page: Optional[int] = None,
    ) -> WindowResult:
        org_id = self.context.organization_id
        if preset is not None:
            return self._query.fetch_quick_range(org_id, preset, page=page)
        return self._query.fetch_window(org_id, page=page, start_date=start, end_date=end)

    def build_summary_report(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        preset: Optional[QuickRange] = None,
    ) -> ReportData:
        window = self.load_events(start=start, end=end, preset=preset)
        return ReportData(
            events=window.events,
            summaries=self.summarize(window.events),
            used_fallback=window.used_fallback,
        )

    def summarize(self, events: list[AttendanceEvent]) -> list[StatSummary]:
        stats = compute_stats(
            events,
            tz=self.context.timezone,
            roster=self.context.roster,
            organization_id=self.context.organization_id,
            calculator=self._calculator,
        )
        summary = list(stats.values())
        summary.sort(key=lambda s: (-s.total_hours_worked, s.employee_id))
        return summary

    def daily_overview(self, day: Optional[date] = None) -> DailyOverview:
        day = day or now_local(self.context.timezone).date()
        window = self._query.fetch_window(self.context.organization_id, start_date=day, end_date=day)
        return compute_daily_overview(
            window.events,
            day=day,
            total_employees=len(self.context.roster),
            tz=self.context.timezone,
        )

    def employee_period_stats(self, employee_id: str, *, start: date, end: date) -> PeriodStats:
        window = self._query.fetch_window(self.context.organization_id, start_date=start, end_date=end)
        events = [e for e in window.events if e.employee_id == str(employee_id)]
        return compute_period_stats(
            events,
            start=start,
            end=end,
            tz=self.context.timezone,
            calculator=self._calculator,
        )

    def analytics(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        preset: Optional[QuickRange] = None,
    ) -> AnalyticsReport:
        """Department, hourly, weekly and top-performer figures for a date range.

        Without a range or preset the last 30 days up to today are used.
        """
        tz = self.context.timezone
        if preset is not None:
            window = quick_range_bounds(preset, self._query.today(), tz)
            start, end = window.start.date(), window.end.date()
        elif start is None and end is None:
            end = self._query.today()
            start = end - timedelta(days=ANALYTICS_DEFAULT_DAYS)
        elif start is None or end is None:
            raise ValidationError("start and end must be given together")

        window = self._query.fetch_window(self.context.organization_id, start_date=start, end_date=end)
        return compute_analytics(
            window.events,
            roster=self.context.roster,
            start=start,
            end=end,
            tz=tz,
            calculator=self._calculator,
        )
