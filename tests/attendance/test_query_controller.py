from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.attendance_reporting.attendance_reporting.attendance.query import WindowedQueryController
from src.attendance_reporting.attendance_reporting.core.enums import QueryMode, QuickRange
from src.attendance_reporting.attendance_reporting.core.exceptions import TransportError, ValidationError
from src.attendance_reporting.attendance_reporting.roster.model import OrganizationContext

UTC = timezone.utc
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def record(i, when, org="org1", employee="e1"):
    return {
        "id": f"r{i}",
        "employeeId": employee,
        "type": "sign-in",
        "timestamp": when.isoformat(),
        "organizationId": org,
    }


class FakeBatchSource:
    def __init__(self, records, *, range_error=None, recent_error=None):
        self.records = records
        self.range_error = range_error
        self.recent_error = recent_error
        self.recent_calls = []
        self.range_calls = []

    def fetch_recent(self, limit):
        self.recent_calls.append(limit)
        if self.recent_error:
            raise self.recent_error
        ordered = sorted(self.records, key=lambda r: r["timestamp"], reverse=True)
        return ordered[:limit]

    def fetch_range(self, organization_id, start_iso, end_iso):
        self.range_calls.append((organization_id, start_iso, end_iso))
        if self.range_error:
            raise self.range_error
        return list(self.records)


def make_controller(source, **kwargs):
    context = OrganizationContext(organization_id="org1", organization_name="Acme", timezone=UTC)
    return WindowedQueryController(source, context, now=lambda: NOW, **kwargs)


def hourly_records(count):
    return [record(i, NOW - timedelta(hours=i)) for i in range(count)]


def test_pages_of_forty_five_records():
    source = FakeBatchSource(hourly_records(45))
    controller = make_controller(source, page_size=30)

    first = controller.fetch_window("org1", page=1)
    second = controller.fetch_window("org1", page=2)

    assert first.mode is QueryMode.PAGED
    assert len(first.events) == 30
    assert first.has_more is True
    assert [e.id for e in first.events][:2] == ["r0", "r1"]
    assert len(second.events) == 15
    assert second.has_more is False
    assert source.recent_calls == [30, 60]


def test_exactly_full_last_page_still_reports_more():
    source = FakeBatchSource(hourly_records(30))
    result = make_controller(source, page_size=30).fetch_window("org1", page=1)

    assert result.has_more is True


def test_range_is_inclusive_to_the_last_millisecond_of_the_end_day():
    end_of_day = datetime(2025, 3, 9, 23, 59, 59, 999000, tzinfo=UTC)
    source = FakeBatchSource(
        [
            record(1, datetime(2025, 3, 8, 0, 0, tzinfo=UTC)),
            record(2, end_of_day),
            record(3, end_of_day + timedelta(milliseconds=1)),
            record(4, datetime(2025, 3, 7, 23, 59, tzinfo=UTC)),
        ]
    )

    result = make_controller(source).fetch_window("org1", start_date=date(2025, 3, 8), end_date=date(2025, 3, 9))

    assert result.mode is QueryMode.RANGED
    assert {e.id for e in result.events} == {"r1", "r2"}
    assert source.range_calls == [("org1", "2025-03-08", "2025-03-09")]


def test_failed_range_query_falls_back_to_recent_records_filtered_locally():
    source = FakeBatchSource(
        [
            record(1, datetime(2025, 3, 9, 9, 0, tzinfo=UTC)),
            record(2, datetime(2025, 3, 1, 9, 0, tzinfo=UTC)),
        ],
        range_error=RuntimeError("endpoint missing"),
    )

    result = make_controller(source, fallback_limit=500).fetch_window(
        "org1", start_date=date(2025, 3, 9), end_date=date(2025, 3, 9)
    )

    assert result.used_fallback is True
    assert [e.id for e in result.events] == ["r1"]
    assert source.recent_calls == [500]


def test_records_of_other_organizations_are_dropped():
    source = FakeBatchSource([record(1, NOW), record(2, NOW, org="org2")])

    result = make_controller(source).fetch_window("org1")

    assert result.mode is QueryMode.RECENT
    assert [e.id for e in result.events] == ["r1"]


def test_quick_range_last_seven_days():
    source = FakeBatchSource(
        [
            record(1, datetime(2025, 3, 3, 0, 0, tzinfo=UTC)),
            record(2, datetime(2025, 3, 2, 23, 59, tzinfo=UTC)),
            record(3, datetime(2025, 3, 10, 11, 0, tzinfo=UTC)),
        ]
    )

    result = make_controller(source).fetch_quick_range("org1", QuickRange.LAST_7_DAYS)

    assert {e.id for e in result.events} == {"r1", "r3"}
    assert source.range_calls[0][1:] == ("2025-03-03", "2025-03-10")


def test_invalid_parameters_are_rejected():
    controller = make_controller(FakeBatchSource([]))

    with pytest.raises(ValidationError):
        controller.fetch_window("org1", page=0)
    with pytest.raises(ValidationError):
        controller.fetch_window("org1", start_date=date(2025, 3, 1))
    with pytest.raises(ValidationError):
        controller.fetch_window("org1", start_date=date(2025, 3, 2), end_date=date(2025, 3, 1))


def test_source_failure_surfaces_as_transport_error():
    source = FakeBatchSource([], recent_error=ConnectionError("down"))

    with pytest.raises(TransportError):
        make_controller(source).fetch_window("org1", page=1)
