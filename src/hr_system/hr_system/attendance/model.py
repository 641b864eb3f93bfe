from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import AttendanceStatus, CheckLocation


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class CheckPoint:
    """One leg (check-in or check-out) of an attendance record."""

    time: datetime
    location: CheckLocation = CheckLocation.OFFICE
    ip_address: Optional[str] = None
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class BreakInterval:
    start: Optional[datetime]
    end: Optional[datetime] = None
    reason: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class AttendanceRecord:
    """One record per (employee, work date).

    ``working_hours`` and ``overtime_hours`` are derived; services recompute
    them before every save.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: Optional[CheckPoint] = None
    check_out: Optional[CheckPoint] = None
    breaks: Tuple[BreakInterval, ...] = ()
    working_hours: float = 0.0
    overtime_hours: float = 0.0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = None
    approved_by: Optional[int] = None
    is_manual_entry: bool = False


@dataclass(frozen=True)
class AttendanceFilter:
    employee_id: Optional[int] = None
    work_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Aggregate over a pay period, copied into payroll records."""

    working_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    leave_days: int = 0
    total_overtime_hours: float = 0.0
