from __future__ import annotations

from typing import Tuple

from ...core.constants import MS_PER_HOUR, STANDARD_WORK_HOURS
from ..model import AttendanceRecord
from .base import WorkingHoursCalculator


class StandardHoursCalculator(WorkingHoursCalculator):
    """Standard rule: (out - in) - closed breaks, not below 0.

    Overtime is whatever exceeds the standard day. A record missing either
    leg has no measured time; manual entries then keep the hours they were
    declared with.
    """

    def __init__(self, standard_work_hours: float = STANDARD_WORK_HOURS):
        self._standard = float(standard_work_hours)

    def hours(self, record: AttendanceRecord) -> Tuple[float, float]:
        if record.check_in is None or record.check_out is None:
            if record.is_manual_entry:
                declared = max(0.0, float(record.working_hours or 0))
                return declared, self.overtime(declared)
            return 0.0, 0.0

        worked_ms = (record.check_out.time - record.check_in.time).total_seconds() * 1000
        for interval in record.breaks:
            if interval.is_closed:
                worked_ms -= (interval.end - interval.start).total_seconds() * 1000

        working = max(0.0, worked_ms / MS_PER_HOUR)
        return working, self.overtime(working)

    def overtime(self, working_hours: float) -> float:
        return max(0.0, working_hours - self._standard)
