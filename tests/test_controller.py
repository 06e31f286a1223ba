from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone

import pytest

from src.attendance_reporting.attendance_reporting.container import Container
from src.attendance_reporting.attendance_reporting.core.exceptions import TransportError
from src.attendance_reporting.attendance_reporting.main import create_app
from src.attendance_reporting.attendance_reporting.roster.model import Roster

UTC = timezone.utc


class FakeRosterRepo:
    def load_roster(self, organization_id):
        return Roster.from_employees([{"id": "e1", "name": "Ada"}, {"id": "e2", "name": "Bo"}])

    def organization_name(self, organization_id):
        return "Acme"


class FakeBatchSource:
    def __init__(self, records, fail=False):
        self.records = records
        self.fail = fail

    def fetch_recent(self, limit):
        if self.fail:
            raise TransportError("offline")
        return self.records[:limit]

    def fetch_range(self, organization_id, start_iso, end_iso):
        return self.fetch_recent(len(self.records))


def today_at(hour, minute=0):
    now = datetime.now(UTC)
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


def records():
    return [
        {
            "id": "1",
            "employeeId": "e1",
            "type": "sign-in",
            "timestamp": today_at(9, 10).isoformat(),
            "isLate": True,
            "organizationId": "org1",
            "notes": "bus, late",
        },
        {
            "id": "2",
            "employeeId": "e1",
            "type": "sign-out",
            "timestamp": today_at(17, 5).isoformat(),
            "organizationId": "org1",
        },
    ]


@pytest.fixture()
def make_client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    def _make(source):
        container = Container(roster_repo=FakeRosterRepo(), source_factory=lambda org: source, timezone=UTC)
        return create_app(container).test_client()

    return _make


def test_attendance_page(make_client):
    client = make_client(FakeBatchSource(records()))

    resp = client.get("/api/organizations/org1/attendance?page=1")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert [r["id"] for r in body["data"]] == ["2", "1"]
    assert body["hasMore"] is False


def test_stats_endpoint(make_client):
    client = make_client(FakeBatchSource(records()))

    body = client.get("/api/organizations/org1/attendance/stats?preset=today").get_json()

    assert body["data"][0]["employeeName"] == "Ada"
    assert body["data"][0]["totalHoursWorked"] == 7.92
    assert body["data"][0]["late"] == 1


def test_overview_and_employee_month(make_client):
    client = make_client(FakeBatchSource(records()))

    overview = client.get("/api/organizations/org1/attendance/overview").get_json()["data"]
    month = today_at(0).strftime("%Y-%m")
    stats = client.get(f"/api/organizations/org1/employees/e1/stats?month={month}").get_json()["data"]

    assert overview["presentEmployees"] == 1
    assert overview["absentEmployees"] == 1
    assert stats["presentDays"] == 1
    assert stats["lateDays"] == 1


def test_csv_export_download(make_client):
    client = make_client(FakeBatchSource(records()))

    resp = client.get("/api/organizations/org1/attendance/export?format=csv&kind=detailed&period=daily")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "Acme_attendance_Daily_detailed_" in resp.headers["Content-Disposition"]
    rows = list(csv.reader(io.StringIO(resp.data.decode("utf-8-sig"))))
    assert rows[0][0] == "Employee ID"
    assert rows[-1][-1] == "bus, late"


def test_bad_input_is_a_400(make_client):
    client = make_client(FakeBatchSource(records()))

    assert client.get("/api/organizations/org1/attendance?start=2025-13-01&end=2025-01-01").status_code == 400
    assert client.get("/api/organizations/org1/attendance?page=0").status_code == 400
    assert client.get("/api/organizations/org1/attendance/export?format=docx").status_code == 400
    assert client.get("/api/organizations/org1/employees/e1/stats").status_code == 400
    assert client.get("/api/organizations/org1/attendance?preset=forever").status_code == 400


def test_unreachable_source_is_a_503(make_client):
    client = make_client(FakeBatchSource([], fail=True))

    resp = client.get("/api/organizations/org1/attendance")

    assert resp.status_code == 503
    assert resp.get_json()["success"] is False


def test_analytics_endpoint(make_client):
    client = make_client(FakeBatchSource(records()))

    body = client.get("/api/organizations/org1/attendance/analytics?preset=last_7_days").get_json()
    data = body["data"]

    assert body["success"] is True
    [dept] = data["departmentStats"]
    assert dept["department"] == "Unknown"
    assert dept["totalEmployees"] == 1
    assert dept["avgPunctualityRate"] == 0
    assert dept["totalHours"] == 7.92
    assert dept["lateArrivals"] == 1
    assert len(data["timePatterns"]) == 24
    assert data["timePatterns"][9]["checkIns"] == 1
    assert data["timePatterns"][17]["checkOuts"] == 1
    assert [p["employeeName"] for p in data["topPerformers"]] == ["Ada"]


def test_analytics_needs_both_ends_of_a_range(make_client):
    client = make_client(FakeBatchSource(records()))

    resp = client.get("/api/organizations/org1/attendance/analytics?start=2025-03-01")

    assert resp.status_code == 400
