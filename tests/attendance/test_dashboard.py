from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from src.attendance_reporting.attendance_reporting.attendance.dashboard import AttendanceDashboard
from src.attendance_reporting.attendance_reporting.attendance.query import WindowedQueryController
from src.attendance_reporting.attendance_reporting.attendance.repository import Subscription
from src.attendance_reporting.attendance_reporting.attendance.socketio_source import SocketIOLiveEventSource
from src.attendance_reporting.attendance_reporting.core.enums import EventType
from src.attendance_reporting.attendance_reporting.core.exceptions import TransportError
from src.attendance_reporting.attendance_reporting.roster.model import OrganizationContext, Roster

UTC = timezone.utc
NOW = datetime(2025, 3, 10, 18, 0, tzinfo=UTC)


class FakeBatchSource:
    def __init__(self, records):
        self.records = records

    def fetch_recent(self, limit):
        return list(self.records)[:limit]

    def fetch_range(self, organization_id, start_iso, end_iso):
        return list(self.records)


class FakeLiveSource:
    def __init__(self, fail_connect=False):
        self.handlers = []
        self.fail_connect = fail_connect
        self.connects = 0
        self.disconnects = 0

    async def connect(self):
        self.connects += 1
        if self.fail_connect:
            raise TransportError("socket down")

    async def disconnect(self):
        self.disconnects += 1

    def subscribe(self, on_event):
        self.handlers.append(on_event)
        return Subscription(lambda: self.handlers.remove(on_event))

    def push(self, payload):
        for handler in list(self.handlers):
            handler(payload)


def make_dashboard(records, live=None):
    roster = Roster.from_employees([{"id": "e1", "name": "Ada"}])
    context = OrganizationContext(organization_id="org1", organization_name="Acme", timezone=UTC, roster=roster)
    query = WindowedQueryController(FakeBatchSource(records), context, now=lambda: NOW)
    return AttendanceDashboard(query, live_source=live)


SIGN_IN = {
    "id": "in",
    "employeeId": "e1",
    "type": "sign-in",
    "timestamp": "2025-03-10T09:00:00Z",
    "organizationId": "org1",
}


def test_open_loads_records_and_stats_follow_live_events():
    live = FakeLiveSource()
    dashboard = make_dashboard([SIGN_IN], live=live)

    assert asyncio.run(dashboard.open(auto_refresh=False)) is True
    before = dashboard.stats()
    assert before["e1"].total_hours_worked == 0.0
    assert dashboard.stats() is before

    live.push(
        {
            "id": "out",
            "employeeId": "e1",
            "type": "sign-out",
            "timestamp": "2025-03-10T17:00:00Z",
            "organizationId": "org1",
        }
    )

    after = dashboard.stats()
    assert after is not before
    assert after["e1"].total_hours_worked == 8.0
    assert dashboard.notice().message == "Ada signed out"
    assert [e.id for e in dashboard.records(type_filter=EventType.SIGN_OUT)] == ["out"]

    dashboard.close()
    assert live.handlers == []


class FakeSocketClient:
    def __init__(self):
        self.handlers = {}
        self.connected = False
        self.connect_calls = []
        self.disconnect_calls = 0

    def on(self, event, handler):
        self.handlers[event] = handler

    async def emit(self, event, data):
        pass

    async def connect(self, url, auth=None, transports=None):
        self.connect_calls.append(url)
        self.connected = True

    async def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False


def test_open_connects_the_socket_feed_and_aclose_disconnects_it():
    fake = FakeSocketClient()
    live = SocketIOLiveEventSource("http://live.test", "org1", client=fake)
    dashboard = make_dashboard([SIGN_IN], live=live)

    asyncio.run(dashboard.open(auto_refresh=False))
    assert fake.connect_calls == ["http://live.test"]
    assert live.connected

    asyncio.run(dashboard.aclose())
    assert fake.disconnect_calls == 1
    assert not live.connected


def test_open_keeps_batch_data_when_live_feed_cannot_connect():
    live = FakeLiveSource(fail_connect=True)
    dashboard = make_dashboard([SIGN_IN], live=live)

    assert asyncio.run(dashboard.open(auto_refresh=False)) is True
    assert live.connects == 1
    assert [e.id for e in dashboard.records()] == ["in"]

    asyncio.run(dashboard.aclose())
    assert live.disconnects == 1
    assert live.handlers == []
