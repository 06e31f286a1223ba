from __future__ import annotations

import asyncio

import pytest
import requests

from src.attendance_reporting.attendance_reporting.attendance.http_source import (
    HttpApiClient,
    HttpBatchRecordSource,
    unwrap_records,
)
from src.attendance_reporting.attendance_reporting.attendance.socketio_source import SocketIOLiveEventSource
from src.attendance_reporting.attendance_reporting.core.exceptions import TransportError
from src.attendance_reporting.attendance_reporting.roster.http_roster_repository import HttpRosterRepository


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(responses):
    session = FakeSession(responses)
    return HttpApiClient("http://api.test/", token="t0k", timeout=3, session=session), session


def test_fetch_recent_unwraps_envelope_and_sends_token():
    client, session = make_client(
        {"http://api.test/api/attendance": FakeResponse({"success": True, "data": [{"id": "1"}]})}
    )

    records = HttpBatchRecordSource(client).fetch_recent(30)

    assert records == [{"id": "1"}]
    assert session.calls[0]["params"] == {"limit": 30}
    assert session.calls[0]["headers"]["Authorization"] == "Bearer t0k"
    assert session.calls[0]["timeout"] == 3.0


def test_fetch_range_passes_window_and_organization():
    client, session = make_client({"http://api.test/api/attendance/report": FakeResponse([{"id": "2"}])})

    records = HttpBatchRecordSource(client).fetch_range("org1", "2025-03-01", "2025-03-31")

    assert records == [{"id": "2"}]
    assert session.calls[0]["params"] == {"startDate": "2025-03-01", "endDate": "2025-03-31", "organizationId": "org1"}


def test_http_failures_become_transport_errors():
    client, _ = make_client(
        {
            "http://api.test/api/attendance": requests.ConnectionError("refused"),
            "http://api.test/api/attendance/report": FakeResponse({}, status=404),
        }
    )
    source = HttpBatchRecordSource(client)

    with pytest.raises(TransportError):
        source.fetch_recent(10)
    with pytest.raises(TransportError):
        source.fetch_range("org1", "2025-03-01", "2025-03-31")


def test_unwrap_records_rejects_failure_envelope():
    with pytest.raises(TransportError):
        unwrap_records({"success": False, "message": "nope"})
    assert unwrap_records({"success": True, "data": {"records": [1]}}) == [1]
    assert unwrap_records({"success": True}) == []


def test_roster_repository_falls_back_to_id_for_missing_name():
    client, _ = make_client(
        {
            "http://api.test/api/employees": FakeResponse({"data": [{"id": 5, "employeeId": "EMP5", "name": "Eve"}]}),
            "http://api.test/api/organizations/org1": requests.Timeout("slow"),
        }
    )
    repo = HttpRosterRepository(client)

    roster = repo.load_roster("org1")

    assert roster.display_name("5") == "Eve"
    assert roster.display_name("EMP5") == "Eve"
    assert len(roster) == 1
    assert repo.organization_name("org1") == "org1"


class FakeSocketClient:
    def __init__(self):
        self.handlers = {}
        self.emitted = []
        self.connected = False

    def on(self, event, handler):
        self.handlers[event] = handler

    async def emit(self, event, data):
        self.emitted.append((event, data))


def test_socketio_source_joins_room_and_dispatches_to_subscribers():
    fake = FakeSocketClient()
    source = SocketIOLiveEventSource("http://live.test", "org1", client=fake)
    first, second = [], []
    sub = source.subscribe(first.append)
    source.subscribe(second.append)

    asyncio.run(fake.handlers["connect"]())
    asyncio.run(fake.handlers["attendance_updated"]({"id": "1"}))
    sub.unsubscribe()
    asyncio.run(fake.handlers["attendance_updated"]({"id": "2"}))

    assert fake.emitted == [("join_organization", {"organizationId": "org1"})]
    assert first == [{"id": "1"}]
    assert second == [{"id": "1"}, {"id": "2"}]
