"""Company policy values used by the attendance, leave and payroll rules.

Defaults reproduce the fixed rates the system has always used. Deployments
override them through the settings module (``PAYROLL_POLICY`` and friends)
and callers may pass a different policy per call.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .constants import STANDARD_WORK_HOURS
from .enums import LeaveType
from .exceptions import ValidationError

DEFAULT_LEAVE_ALLOCATIONS: Mapping[LeaveType, float] = MappingProxyType(
    {
        LeaveType.ANNUAL: 25,
        LeaveType.SICK: 10,
        LeaveType.PERSONAL: 5,
        LeaveType.MATERNITY: 90,
        LeaveType.PATERNITY: 15,
        LeaveType.EMERGENCY: 3,
        LeaveType.UNPAID: 0,
    }
)


@dataclass(frozen=True)
class AttendancePolicy:
    standard_work_hours: float = STANDARD_WORK_HOURS

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "AttendancePolicy":
        values = dict(values or {})
        _reject_unknown(cls, values)
        if "standard_work_hours" in values:
            values["standard_work_hours"] = float(values["standard_work_hours"])
        return cls(**values)


@dataclass(frozen=True)
class LeavePolicy:
    allocations: Mapping[LeaveType, float] = field(default_factory=lambda: DEFAULT_LEAVE_ALLOCATIONS)

    def allocated(self, leave_type: LeaveType) -> float:
        return float(self.allocations.get(leave_type, 0))

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "LeavePolicy":
        values = dict(values or {})
        _reject_unknown(cls, values)
        overrides = values.get("allocations") or {}
        allocations = dict(DEFAULT_LEAVE_ALLOCATIONS)
        for key, days in overrides.items():
            try:
                allocations[LeaveType(key)] = float(days)
            except ValueError:
                raise ValidationError(f"Unknown leave type in policy: {key}")
        return cls(allocations=MappingProxyType(allocations))


@dataclass(frozen=True)
class PayrollPolicy:
    """Rates used by payroll calculation.

    The overtime hourly rate is ``base_salary / (days_per_month * hours_per_day)``
    times ``overtime_multiplier``; it ignores the employee's pay frequency and
    the real length of the month.
    """

    days_per_month: int = 30
    hours_per_day: int = STANDARD_WORK_HOURS
    overtime_multiplier: Decimal = Decimal("1.5")
    federal_tax_rate: Decimal = Decimal("0.15")
    state_tax_rate: Decimal = Decimal("0.05")
    local_tax_rate: Decimal = Decimal("0")
    health_insurance_premium: Decimal = Decimal("200")
    retirement_rate: Decimal = Decimal("0.06")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "PayrollPolicy":
        values = dict(values or {})
        _reject_unknown(cls, values)
        parsed: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in values:
                continue
            raw = values[f.name]
            parsed[f.name] = int(raw) if f.type in ("int", int) else Decimal(str(raw))
        return cls(**parsed)


def _reject_unknown(cls, values: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValidationError(f"Unknown {cls.__name__} settings: {', '.join(unknown)}")
