from __future__ import annotations

from typing import Optional

from .base import WorkedHoursCalculator
from ...attendance.model import AttendanceEvent
from ...core.constants import MAX_SHIFT_HOURS


class StandardWorkedHoursCalculator(WorkedHoursCalculator):
    """Standard rule: sign-out minus sign-in, accepted only when 0 < hours < 24."""

    def __init__(self, *, max_hours: float = MAX_SHIFT_HOURS):
        self._max_hours = float(max_hours)

    def pair_hours(self, sign_in: AttendanceEvent, sign_out: AttendanceEvent) -> Optional[float]:
        hours = (sign_out.timestamp - sign_in.timestamp).total_seconds() / 3600
        if 0 < hours < self._max_hours:
            return hours
        return None
