from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class AttendanceEvent:
    """Thực thể miền (domain): một lần sign-in hoặc sign-out đã chuẩn hoá."""

    id: str
    employee_id: str
    type: EventType
    timestamp: datetime
    employee_name: Optional[str] = None
    is_late: bool = False
    organization_id: Optional[str] = None
    location: Optional[Location] = None
    location_invalid: bool = False
    verification_method: Optional[str] = None
    notes: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp_substituted: bool = False

    @property
    def is_sign_in(self) -> bool:
        return self.type == EventType.SIGN_IN

    @property
    def status_label(self) -> str:
        if self.is_sign_in:
            return "Late" if self.is_late else "On Time"
        return "Sign Out"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "isLate": self.is_late,
            "status": self.status_label,
            "organizationId": self.organization_id,
            "location": (
                {"latitude": self.location.latitude, "longitude": self.location.longitude}
                if self.location
                else ("invalid" if self.location_invalid else None)
            ),
            "verificationMethod": self.verification_method,
            "notes": self.notes,
            "ipAddress": self.ip_address,
        }
