from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from ..model import AttendanceRecord


class WorkingHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def hours(self, record: AttendanceRecord) -> Tuple[float, float]:
        """Return ``(working_hours, overtime_hours)`` for a record."""
        raise NotImplementedError
