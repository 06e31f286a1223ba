from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..core.constants import DEFAULT_PAGE_SIZE, FALLBACK_FETCH_LIMIT, RECENT_FETCH_LIMIT
from ..core.enums import QueryMode, QuickRange
from ..core.exceptions import TransportError, ValidationError
from ..roster.model import OrganizationContext
from .model import AttendanceEvent
from .normalizer import normalize_many
from .repository import BatchRecordSource, RawRecord
from .working_set import dedupe_events, sort_events

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowResult:
    events: list[AttendanceEvent]
    has_more: bool = False
    mode: QueryMode = QueryMode.RECENT
    used_fallback: bool = False


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def quick_range_bounds(preset: QuickRange, today: date, tz) -> DateWindow:
    start_day = today - timedelta(days=preset.value)
    return DateWindow(start=start_of_day(start_day, tz), end=end_of_day(today, tz))


class WindowedQueryController:
    """Paged and date-ranged retrieval against a batch record source.

    Known limitation: `has_more` is true whenever a page comes back exactly
    full, so a final page of exactly `page_size` records still reports more.
    """

    def __init__(
        self,
        source: BatchRecordSource,
        context: OrganizationContext,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        fallback_limit: int = FALLBACK_FETCH_LIMIT,
        recent_limit: int = RECENT_FETCH_LIMIT,
        now: Optional[Callable[[], datetime]] = None,
    ):
        if page_size < 1:
            raise ValidationError("page_size must be at least 1")
        self._source = source
        self._context = context
        self._page_size = int(page_size)
        self._fallback_limit = int(fallback_limit)
        self._recent_limit = int(recent_limit)
        self._now = now or (lambda: now_local(context.timezone))

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def context(self) -> OrganizationContext:
        return self._context

    def today(self) -> date:
        return self._now().date()

    def fetch_window(
        self,
        organization_id: str,
        *,
        page: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> WindowResult:
        if (start_date is None) != (end_date is None):
            raise ValidationError("start_date and end_date must be given together")
        if page is not None and page < 1:
            raise ValidationError("page must be at least 1")

        organization_id = str(organization_id)
        if start_date is not None:
            if start_date > end_date:
                raise ValidationError("start_date must not be after end_date")
            window = DateWindow(
                start=start_of_day(start_date, self._context.timezone),
                end=end_of_day(end_date, self._context.timezone),
            )
            events, used_fallback = self._fetch_ranged(organization_id, window)
            if page is None:
                return WindowResult(events=events, mode=QueryMode.RANGED, used_fallback=used_fallback)
            chunk = self._page_slice(events, page)
            return WindowResult(
                events=chunk,
                has_more=len(chunk) == self._page_size,
                mode=QueryMode.RANGED,
                used_fallback=used_fallback,
            )

        if page is not None:
            # the source only knows "most recent N", so page p needs the first p pages
            raws = self._call(self._source.fetch_recent, self._page_size * page)
            events = self._prepare(organization_id, raws)
            chunk = self._page_slice(events, page)
            return WindowResult(events=chunk, has_more=len(chunk) == self._page_size, mode=QueryMode.PAGED)

        raws = self._call(self._source.fetch_recent, self._recent_limit)
        return WindowResult(events=self._prepare(organization_id, raws), mode=QueryMode.RECENT)

    def fetch_quick_range(
        self,
        organization_id: str,
        preset: QuickRange,
        *,
        today: Optional[date] = None,
        page: Optional[int] = None,
    ) -> WindowResult:
        today = today or self.today()
        window = quick_range_bounds(preset, today, self._context.timezone)
        return self.fetch_window(
            organization_id,
            page=page,
            start_date=window.start.date(),
            end_date=window.end.date(),
        )

    def _fetch_ranged(self, organization_id: str, window: DateWindow) -> tuple[list[AttendanceEvent], bool]:
        start_iso = window.start.date().isoformat()
        end_iso = window.end.date().isoformat()
        try:
            raws = self._source.fetch_range(organization_id, start_iso, end_iso)
            used_fallback = False
        except Exception as exc:
            logger.warning(
                "Ranged fetch %s..%s failed (%s); falling back to the most recent %d records",
                start_iso,
                end_iso,
                exc,
                self._fallback_limit,
            )
            raws = self._call(self._source.fetch_recent, self._fallback_limit)
            used_fallback = True

        events = [e for e in self._prepare(organization_id, raws) if window.contains(e.timestamp)]
        return events, used_fallback

    def _prepare(self, organization_id: str, raws: Optional[Sequence[RawRecord]]) -> list[AttendanceEvent]:
        events = normalize_many(raws or (), tz=self._context.timezone, now=self._now())
        scoped = [e for e in events if e.organization_id is None or e.organization_id == organization_id]
        return sort_events(dedupe_events(scoped))

    def _page_slice(self, events: list[AttendanceEvent], page: int) -> list[AttendanceEvent]:
        start = (page - 1) * self._page_size
        return events[start : start + self._page_size]

    @staticmethod
    def _call(fn, *args):
        try:
            return fn(*args)
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(f"Attendance source unavailable: {exc}") from exc
