from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence

RawRecord = Mapping[str, Any]
EventCallback = Callable[[RawRecord], None]


class BatchRecordSource(Protocol):
    """Paged/windowed access to stored attendance records.

    Implementations may raise on transport failure and are not required to
    sort or deduplicate; the query controller does both.
    """

    def fetch_recent(self, limit: int) -> Sequence[RawRecord]:
        raise NotImplementedError

    def fetch_range(self, organization_id: str, start_iso: str, end_iso: str) -> Sequence[RawRecord]:
        raise NotImplementedError


class Subscription:
    """Handle returned by a live source; `unsubscribe()` is idempotent."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class LiveEventSource(Protocol):
    """Push feed of new attendance events; may deliver the same event twice.

    `connect()` starts delivery and `disconnect()` ends it; subscriptions
    may be taken before connecting.
    """

    async def connect(self) -> None:
        raise NotImplementedError

    async def disconnect(self) -> None:
        raise NotImplementedError

    def subscribe(self, on_event: EventCallback) -> Subscription:
        raise NotImplementedError
