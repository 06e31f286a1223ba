from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import NOTICE_DISPLAY_SECONDS
from ..core.enums import MergeOutcome, NoticeState
from ..roster.model import OrganizationContext
from .model import AttendanceEvent
from .normalizer import normalize
from .repository import LiveEventSource, Subscription
from .working_set import WorkingSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityNotice:
    message: str
    event: AttendanceEvent
    shown_at: float


class NoticeBoard:
    """Transient "new activity" banner: IDLE -> SHOWN -> IDLE.

    Leaves SHOWN after `display_seconds` or on `dismiss()`. Purely advisory;
    nothing else waits on it.
    """

    def __init__(self, *, display_seconds: float = NOTICE_DISPLAY_SECONDS, clock: Callable[[], float] = time.monotonic):
        self._display_seconds = float(display_seconds)
        self._clock = clock
        self._notice: Optional[ActivityNotice] = None

    @property
    def state(self) -> NoticeState:
        return NoticeState.SHOWN if self.current() else NoticeState.IDLE

    def show(self, message: str, event: AttendanceEvent) -> ActivityNotice:
        self._notice = ActivityNotice(message=message, event=event, shown_at=self._clock())
        return self._notice

    def dismiss(self) -> None:
        self._notice = None

    def current(self) -> Optional[ActivityNotice]:
        if self._notice and self._clock() - self._notice.shown_at >= self._display_seconds:
            self._notice = None
        return self._notice


def describe_event(event: AttendanceEvent, context: OrganizationContext) -> str:
    name = context.roster.display_name(event.employee_id, event.employee_name)
    if event.is_sign_in:
        return f"{name} signed in (late)" if event.is_late else f"{name} signed in"
    return f"{name} signed out"


class LiveReconciler:
    """Merge pushed events into a working set, idempotently by id."""

    def __init__(
        self,
        working_set: WorkingSet,
        context: OrganizationContext,
        *,
        notices: Optional[NoticeBoard] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._working_set = working_set
        self._context = context
        self._notices = notices or NoticeBoard()
        self._now = now or (lambda: now_local(context.timezone))
        self._subscription: Optional[Subscription] = None

    @property
    def notices(self) -> NoticeBoard:
        return self._notices

    def on_event(self, raw: Any) -> MergeOutcome:
        event = normalize(raw, tz=self._context.timezone, now=self._now())
        if event is None:
            return MergeOutcome.MALFORMED

        if not self._working_set.in_scope(event):
            logger.debug("Ignoring live event %s for organization %s", event.id, event.organization_id)
            return MergeOutcome.OUT_OF_SCOPE

        outcome = self._working_set.add(event, live=True)
        if outcome is MergeOutcome.DUPLICATE:
            logger.debug("Ignoring duplicate live event %s", event.id)
        elif outcome is MergeOutcome.ACCEPTED:
            self._notices.show(describe_event(event, self._context), event)
        return outcome

    def attach(self, source: LiveEventSource) -> Subscription:
        self.detach()
        self._subscription = source.subscribe(self.on_event)
        return self._subscription

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
