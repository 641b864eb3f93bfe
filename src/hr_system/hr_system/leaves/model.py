from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import HalfDayPeriod, LeaveStatus, LeaveType


@dataclass(frozen=True)
class EmergencyContact:
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


@dataclass(frozen=True)
class LeaveRequest:
    """A leave application.

    ``total_days`` is derived from the date range and recomputed on every save.
    Only ``pending`` requests can change; the other states are final.
    """

    leave_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    total_days: float = 0.0
    status: LeaveStatus = LeaveStatus.PENDING
    applied_date: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriod] = None
    emergency_contact: Optional[EmergencyContact] = None


@dataclass(frozen=True)
class LeaveFilter:
    employee_id: Optional[int] = None
    status: Optional[LeaveStatus] = None
    leave_type: Optional[LeaveType] = None


@dataclass(frozen=True)
class LeaveBalance:
    leave_type: LeaveType
    allocated: float
    used: float
    remaining: float
