from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import EventType, SortField
from ..core.exceptions import TransportError
from ..reports.aggregation import compute_stats
from ..reports.calculator.base import WorkedHoursCalculator
from ..reports.calculator.standard_calculator import StandardWorkedHoursCalculator
from ..reports.model import StatSummary
from ..roster.model import OrganizationContext
from .live import ActivityNotice, LiveReconciler, NoticeBoard
from .model import AttendanceEvent
from .query import WindowedQueryController
from .refresh import RefreshCoordinator, RefreshRequest
from .repository import LiveEventSource
from .working_set import WorkingSet

logger = logging.getLogger(__name__)


class AttendanceDashboard:
    """One organization's live view: working set, live merge, refresh and stats.

    Statistics are recomputed only when the working set revision has moved
    since the last call.
    """

    def __init__(
        self,
        query: WindowedQueryController,
        *,
        live_source: Optional[LiveEventSource] = None,
        calculator: Optional[WorkedHoursCalculator] = None,
        notices: Optional[NoticeBoard] = None,
        interval_seconds: Optional[float] = None,
    ):
        self._context = query.context
        self._calculator = calculator or StandardWorkedHoursCalculator()
        self.working_set = WorkingSet(self._context.organization_id)
        self.reconciler = LiveReconciler(self.working_set, self._context, notices=notices)
        kwargs = {} if interval_seconds is None else {"interval_seconds": interval_seconds}
        self.refresher = RefreshCoordinator(query, self.working_set, **kwargs)
        self._live_source = live_source
        self._stats_revision = -1
        self._stats: dict[str, StatSummary] = {}

    @property
    def context(self) -> OrganizationContext:
        return self._context

    async def open(self, request: Optional[RefreshRequest] = None, *, auto_refresh: bool = True) -> bool:
        if self._live_source is not None:
            self.reconciler.attach(self._live_source)
            try:
                await self._live_source.connect()
            except TransportError as exc:
                # batch refresh still keeps the view current
                logger.warning("Live updates unavailable for %s: %s", self._context.organization_id, exc)
        applied = await self.refresher.refresh(request)
        if auto_refresh:
            self.refresher.start_auto_refresh()
        return applied

    def close(self) -> None:
        self.reconciler.detach()
        self.refresher.close()
        logger.debug("Closed dashboard for %s", self._context.organization_id)

    async def aclose(self) -> None:
        """`close()` plus disconnecting the live feed."""
        self.close()
        if self._live_source is not None:
            await self._live_source.disconnect()

    def stats(self) -> dict[str, StatSummary]:
        if self._stats_revision != self.working_set.revision:
            self._stats = compute_stats(
                self.working_set.events(),
                tz=self._context.timezone,
                roster=self._context.roster,
                organization_id=self._context.organization_id,
                calculator=self._calculator,
            )
            self._stats_revision = self.working_set.revision
        return self._stats

    def records(
        self, *, type_filter: Optional[EventType] = None, search: Optional[str] = None
    ) -> list[AttendanceEvent]:
        return self.working_set.view(type_filter=type_filter, search=search, roster=self._context.roster)

    def sort_by(self, field: SortField) -> None:
        self.working_set.set_sort(field)

    def notice(self) -> Optional[ActivityNotice]:
        return self.reconciler.notices.current()
