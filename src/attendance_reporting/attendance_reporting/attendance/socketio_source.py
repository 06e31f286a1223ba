from __future__ import annotations

import logging
from typing import Any, Optional

import socketio

from ..core.exceptions import TransportError
from .repository import EventCallback, LiveEventSource, Subscription

logger = logging.getLogger(__name__)

ATTENDANCE_EVENT = "attendance_updated"
JOIN_EVENT = "join_organization"


class SocketIOLiveEventSource(LiveEventSource):
    """Live attendance feed over a Socket.IO connection.

    Joins the organization's room on every (re)connect. Several subscribers
    can share one connection; unsubscribing removes only that subscriber.
    """

    def __init__(
        self,
        url: str,
        organization_id: str,
        *,
        token: Optional[str] = None,
        client: Optional[socketio.AsyncClient] = None,
    ):
        self._url = url
        self._organization_id = str(organization_id)
        self._token = token
        self._client = client or socketio.AsyncClient(reconnection=True, logger=False, engineio_logger=False)
        self._callbacks: list[EventCallback] = []
        self._client.on("connect", self._on_connect)
        self._client.on(ATTENDANCE_EVENT, self._dispatch)

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    async def connect(self) -> None:
        auth = {"token": self._token} if self._token else None
        try:
            await self._client.connect(self._url, auth=auth, transports=["websocket", "polling"])
        except socketio.exceptions.ConnectionError as exc:
            raise TransportError(f"Live feed unavailable at {self._url}: {exc}") from exc

    async def disconnect(self) -> None:
        if self._client.connected:
            await self._client.disconnect()

    def subscribe(self, on_event: EventCallback) -> Subscription:
        self._callbacks.append(on_event)

        def cancel() -> None:
            if on_event in self._callbacks:
                self._callbacks.remove(on_event)

        return Subscription(cancel)

    async def _on_connect(self) -> None:
        logger.info("Live feed connected; joining organization %s", self._organization_id)
        await self._client.emit(JOIN_EVENT, {"organizationId": self._organization_id})

    async def _dispatch(self, payload: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(payload)
            except Exception:
                logger.exception("Live attendance handler failed")
