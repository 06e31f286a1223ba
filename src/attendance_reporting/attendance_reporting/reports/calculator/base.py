from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...attendance.model import AttendanceEvent


class WorkedHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def pair_hours(self, sign_in: AttendanceEvent, sign_out: AttendanceEvent) -> Optional[float]:
        """Hours for one same-day pair, or None when the pair is anomalous."""
        raise NotImplementedError
