from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Roster
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_roster(self, organization_id: str) -> Roster:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employeeId, name, department
                FROM employees
                WHERE organizationId=%s
                ORDER BY name
                """,
                (str(organization_id),),
            )
            return Roster.from_employees(fetchall(cur))

    def organization_name(self, organization_id: str) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT name FROM organizations WHERE id=%s", (str(organization_id),))
            row = fetchone(cur)
            if not row or not row.get("name"):
                return str(organization_id)
            return str(row["name"])
