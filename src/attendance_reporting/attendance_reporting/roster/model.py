from __future__ import annotations

from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Iterable, Mapping, Optional

from ..common.validators import require_non_empty
from ..core.constants import UNKNOWN_EMPLOYEE


@dataclass(frozen=True)
class RosterEntry:
    employee_id: str
    name: str
    department: Optional[str] = None


@dataclass(frozen=True)
class Roster:
    """Read-only employee lookup keyed by every id form an employee is known by."""

    entries: Mapping[str, RosterEntry] = field(default_factory=dict)

    @classmethod
    def from_employees(cls, employees: Iterable[Mapping[str, Any]]) -> "Roster":
        entries: dict[str, RosterEntry] = {}
        for emp in employees or ():
            ids = [emp.get(k) for k in ("id", "_id", "employeeId", "employee_id")]
            ids = [str(i).strip() for i in ids if i is not None and str(i).strip()]
            name = emp.get("name") or emp.get("full_name")
            if not ids or not name:
                continue
            entry = RosterEntry(employee_id=ids[0], name=str(name), department=emp.get("department") or None)
            for key in ids:
                entries.setdefault(key, entry)
        return cls(entries=entries)

    def resolve(self, employee_id: Any) -> Optional[RosterEntry]:
        if employee_id is None:
            return None
        return self.entries.get(str(employee_id).strip())

    def display_name(self, employee_id: Any, fallback: Optional[str] = None) -> str:
        entry = self.resolve(employee_id)
        if entry and entry.name:
            return entry.name
        return fallback or UNKNOWN_EMPLOYEE

    def department(self, employee_id: Any) -> str:
        entry = self.resolve(employee_id)
        return (entry.department or "") if entry else ""

    def employees(self) -> list[RosterEntry]:
        """Each employee once, in the order they were loaded."""
        unique: dict[str, RosterEntry] = {}
        for entry in self.entries.values():
            unique.setdefault(entry.employee_id, entry)
        return list(unique.values())

    def __len__(self) -> int:
        return len(self.employees())


@dataclass(frozen=True)
class OrganizationContext:
    """Everything the reporting core needs to know about the organization in view."""

    organization_id: str
    organization_name: str
    timezone: tzinfo
    roster: Roster = field(default_factory=Roster)

    def __post_init__(self):
        object.__setattr__(self, "organization_id", require_non_empty(self.organization_id, "organization_id"))
