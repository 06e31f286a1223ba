from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Callable, Optional

from .attendance.dashboard import AttendanceDashboard
from .attendance.http_source import HttpApiClient, HttpBatchRecordSource
from .attendance.live import NoticeBoard
from .attendance.mysql_source import MySQLBatchRecordSource
from .attendance.query import WindowedQueryController
from .attendance.repository import BatchRecordSource, LiveEventSource
from .attendance.socketio_source import SocketIOLiveEventSource
from .common.datetime_utils import get_timezone
from .core.constants import AUTO_REFRESH_SECONDS, DEFAULT_PAGE_SIZE, FALLBACK_FETCH_LIMIT, NOTICE_DISPLAY_SECONDS
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .exports.service import ExportService
from .reports.service import AttendanceReportService
from .roster.http_roster_repository import HttpRosterRepository
from .roster.model import OrganizationContext
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository


@dataclass(frozen=True)
class Container:
    roster_repo: RosterRepository
    source_factory: Callable[[str], BatchRecordSource]
    timezone: tzinfo
    live_source_factory: Optional[Callable[[str], LiveEventSource]] = None

    page_size: int = DEFAULT_PAGE_SIZE
    fallback_limit: int = FALLBACK_FETCH_LIMIT
    auto_refresh_seconds: float = AUTO_REFRESH_SECONDS
    notice_display_seconds: float = NOTICE_DISPLAY_SECONDS

    def context_for(self, organization_id: str) -> OrganizationContext:
        organization_id = str(organization_id)
        return OrganizationContext(
            organization_id=organization_id,
            organization_name=self.roster_repo.organization_name(organization_id),
            timezone=self.timezone,
            roster=self.roster_repo.load_roster(organization_id),
        )

    def query_for(self, organization_id: str) -> WindowedQueryController:
        context = self.context_for(organization_id)
        return WindowedQueryController(
            self.source_factory(context.organization_id),
            context,
            page_size=self.page_size,
            fallback_limit=self.fallback_limit,
        )

    def reports_for(self, organization_id: str) -> AttendanceReportService:
        return AttendanceReportService(self.query_for(organization_id))

    def exports_for(self, organization_id: str) -> ExportService:
        return ExportService(self.reports_for(organization_id))

    def dashboard_for(self, organization_id: str) -> AttendanceDashboard:
        query = self.query_for(organization_id)
        live = self.live_source_factory(query.context.organization_id) if self.live_source_factory else None
        return AttendanceDashboard(
            query,
            live_source=live,
            notices=NoticeBoard(display_seconds=self.notice_display_seconds),
            interval_seconds=self.auto_refresh_seconds,
        )


def build_container(settings: Any) -> Container:
    """Wire concrete collaborators from a settings module."""

    backend = str(getattr(settings, "BATCH_SOURCE", "http")).lower()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG", {})))
        roster_repo: RosterRepository = MySQLRosterRepository(conn)

        def source_factory(org_id: str) -> BatchRecordSource:
            return MySQLBatchRecordSource(conn, org_id)

    elif backend == "http":
        token = getattr(settings, "ATTENDANCE_API_TOKEN", "") or None
        client = HttpApiClient(
            getattr(settings, "ATTENDANCE_API_URL"),
            token=token,
            timeout=float(getattr(settings, "HTTP_TIMEOUT_SECONDS", 15)),
        )
        roster_repo = HttpRosterRepository(client)

        def source_factory(org_id: str) -> BatchRecordSource:
            return HttpBatchRecordSource(client)

    else:
        raise ValidationError(f"Unknown BATCH_SOURCE {backend!r}")

    live_url = getattr(settings, "LIVE_EVENTS_URL", "") or ""
    live_source_factory = None
    if live_url:
        live_token = getattr(settings, "ATTENDANCE_API_TOKEN", "") or None

        def live_source_factory(org_id: str) -> LiveEventSource:
            return SocketIOLiveEventSource(live_url, org_id, token=live_token)

    return Container(
        roster_repo=roster_repo,
        source_factory=source_factory,
        timezone=get_timezone(getattr(settings, "TIMEZONE", "") or None),
        live_source_factory=live_source_factory,
        page_size=int(getattr(settings, "PAGE_SIZE", DEFAULT_PAGE_SIZE)),
        fallback_limit=int(getattr(settings, "FALLBACK_FETCH_LIMIT", FALLBACK_FETCH_LIMIT)),
        auto_refresh_seconds=float(getattr(settings, "AUTO_REFRESH_SECONDS", AUTO_REFRESH_SECONDS)),
        notice_display_seconds=float(getattr(settings, "NOTICE_DISPLAY_SECONDS", NOTICE_DISPLAY_SECONDS)),
    )
