from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..core.enums import EventType, MergeOutcome, SortField
from ..roster.model import Roster
from .model import AttendanceEvent


@dataclass(frozen=True)
class _Entry:
    event: AttendanceEvent
    # 0 for refresh-loaded events, otherwise the live arrival sequence
    live_sequence: int = 0


class WorkingSet:
    """In-memory, id-keyed, always-sorted events for one organization view.

    Every mutation re-sorts the whole set; nothing relies on incremental
    order being preserved.
    """

    def __init__(
        self,
        organization_id: str,
        *,
        sort_field: SortField = SortField.TIMESTAMP,
        descending: bool = True,
    ):
        self._organization_id = str(organization_id)
        self._sort_field = sort_field
        self._descending = descending
        self._entries: dict[str, _Entry] = {}
        self._ordered: list[AttendanceEvent] = []
        self._live_sequence = 0
        self._revision = 0

    @property
    def organization_id(self) -> str:
        return self._organization_id

    @property
    def revision(self) -> int:
        """Bumped on every effective change; used for lazy recomputation."""
        return self._revision

    @property
    def live_sequence(self) -> int:
        return self._live_sequence

    @property
    def sort_field(self) -> SortField:
        return self._sort_field

    @property
    def descending(self) -> bool:
        return self._descending

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, event_id: object) -> bool:
        return str(event_id) in self._entries

    def events(self) -> list[AttendanceEvent]:
        return list(self._ordered)

    def in_scope(self, event: AttendanceEvent) -> bool:
        return event.organization_id is None or event.organization_id == self._organization_id

    def add(self, event: AttendanceEvent, *, live: bool = False) -> MergeOutcome:
        if not self.in_scope(event):
            return MergeOutcome.OUT_OF_SCOPE
        if event.id in self._entries:
            return MergeOutcome.DUPLICATE

        sequence = 0
        if live:
            self._live_sequence += 1
            sequence = self._live_sequence
        self._entries[event.id] = _Entry(event=event, live_sequence=sequence)
        self._resort()
        return MergeOutcome.ACCEPTED

    def replace(self, events: Iterable[AttendanceEvent], *, keep_live_after: Optional[int] = None) -> None:
        """Swap in a refresh result.

        Live events merged after sequence `keep_live_after` are kept so a
        refresh that was in flight while they arrived cannot drop them.
        """

        entries: dict[str, _Entry] = {}
        for event in events:
            if not self.in_scope(event) or event.id in entries:
                continue
            entries[event.id] = _Entry(event=event)

        if keep_live_after is not None:
            for event_id, entry in self._entries.items():
                if entry.live_sequence > keep_live_after and event_id not in entries:
                    entries[event_id] = entry

        self._entries = entries
        self._resort()

    def clear(self) -> None:
        self._entries = {}
        self._resort()

    def set_sort(self, field: SortField) -> None:
        """Same field flips direction, a new field starts descending."""
        if field == self._sort_field:
            self._descending = not self._descending
        else:
            self._sort_field = field
            self._descending = True
        self._resort()

    def view(
        self,
        *,
        type_filter: Optional[EventType] = None,
        search: Optional[str] = None,
        roster: Optional[Roster] = None,
    ) -> list[AttendanceEvent]:
        term = (search or "").strip().lower()
        out: list[AttendanceEvent] = []
        for event in self._ordered:
            if type_filter is not None and event.type != type_filter:
                continue
            if term and not _matches(event, term, roster):
                continue
            out.append(event)
        return out

    def _resort(self) -> None:
        self._ordered = sort_events(
            (entry.event for entry in self._entries.values()),
            field=self._sort_field,
            descending=self._descending,
        )
        self._revision += 1


def sort_events(
    events: Iterable[AttendanceEvent],
    *,
    field: SortField = SortField.TIMESTAMP,
    descending: bool = True,
) -> list[AttendanceEvent]:
    # id breaks ties between equal timestamps
    if field == SortField.EMPLOYEE_ID:
        return sorted(events, key=lambda e: (e.employee_id, e.timestamp, e.id), reverse=descending)
    return sorted(events, key=lambda e: (e.timestamp, e.id), reverse=descending)


def dedupe_events(events: Sequence[AttendanceEvent]) -> list[AttendanceEvent]:
    seen: set[str] = set()
    out: list[AttendanceEvent] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        out.append(event)
    return out


def _matches(event: AttendanceEvent, term: str, roster: Optional[Roster]) -> bool:
    haystack = [event.employee_name or ""]
    if roster is not None:
        entry = roster.resolve(event.employee_id)
        if entry:
            haystack.extend([entry.name or "", entry.department or ""])
    return any(term in value.lower() for value in haystack if value)
