from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import BatchRecordSource, RawRecord

_SELECT = """
    SELECT a.id, a.employeeId, e.name AS employeeName, a.organizationId, a.type,
           a.timestamp, a.isLate, a.location, a.verificationMethod, a.notes, a.ipAddress
    FROM attendances a
    LEFT JOIN employees e ON e.id = a.employeeId
"""


class MySQLBatchRecordSource(BatchRecordSource):
    """Batch source reading the `attendances` table of one organization."""

    def __init__(self, conn_factory: DatabaseConnection, organization_id: str):
        self._conn_factory = conn_factory
        self._organization_id = str(organization_id)

    def fetch_recent(self, limit: int) -> Sequence[RawRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE a.organizationId=%s
                ORDER BY a.timestamp DESC
                LIMIT %s
                """,
                (self._organization_id, int(limit)),
            )
            return fetchall(cur)

    def fetch_range(self, organization_id: str, start_iso: str, end_iso: str) -> Sequence[RawRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE a.organizationId=%s
                  AND a.timestamp >= %s
                  AND a.timestamp < DATE_ADD(%s, INTERVAL 1 DAY)
                ORDER BY a.timestamp DESC
                """,
                (str(organization_id), start_iso, end_iso),
            )
            return fetchall(cur)
