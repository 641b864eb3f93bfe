"""Request payload -> payroll dataclasses.

Derived values (overtime amount and the ``calculations`` block) are never
read from the payload; the service recomputes them.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional

from ..attendance.model import AttendanceSummary
from ..common.datetime_utils import month_bounds
from ..common.money import to_money
from ..common.validators import (
    parse_decimal,
    parse_enum,
    parse_float,
    parse_int,
    parse_optional_date,
    require_field,
)
from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import ValidationError
from .model import (
    Allowances,
    Bonuses,
    Deductions,
    Earnings,
    InsuranceDeductions,
    OvertimePay,
    PayPeriod,
    PayrollRecord,
    TaxDeductions,
)

MAX_NOTES_LENGTH = 1000


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"{key} must be an object")
    return value


def _money(data: Mapping[str, Any], key: str, base) -> Any:
    if key not in data:
        return base
    return to_money(parse_decimal(data[key], key))


def parse_period(data: Mapping[str, Any], base: Optional[PayPeriod] = None) -> PayPeriod:
    v = _section(data, "pay_period")
    month = parse_int(v.get("month", base.month if base else None), "month")
    year = parse_int(v.get("year", base.year if base else None), "year")
    default_start, default_end = month_bounds(year, month)
    start = parse_optional_date(v.get("start_date"), "start_date") or default_start
    end = parse_optional_date(v.get("end_date"), "end_date") or default_end
    if end < start:
        raise ValidationError("Pay period end date must be after start date")
    return PayPeriod(month=month, year=year, start_date=start, end_date=end)


def parse_earnings(data: Mapping[str, Any], base: Optional[Earnings] = None) -> Earnings:
    base = base or Earnings()
    v = _section(data, "earnings")
    overtime = _section(v, "overtime")
    bonuses = _section(v, "bonuses")
    allowances = _section(v, "allowances")
    if "base_salary" in v:
        base_salary = to_money(parse_decimal(v["base_salary"], "base_salary"))
    else:
        base_salary = base.base_salary
    return Earnings(
        base_salary=base_salary,
        overtime=OvertimePay(
            hours=parse_float(overtime["hours"], "overtime hours", minimum=0)
            if "hours" in overtime
            else base.overtime.hours,
            rate=parse_decimal(overtime["rate"], "overtime rate") if "rate" in overtime else base.overtime.rate,
            amount=base.overtime.amount,
        ),
        bonuses=Bonuses(
            performance=_money(bonuses, "performance", base.bonuses.performance),
            holiday=_money(bonuses, "holiday", base.bonuses.holiday),
            other=_money(bonuses, "other", base.bonuses.other),
        ),
        allowances=Allowances(
            transport=_money(allowances, "transport", base.allowances.transport),
            meal=_money(allowances, "meal", base.allowances.meal),
            housing=_money(allowances, "housing", base.allowances.housing),
            other=_money(allowances, "other", base.allowances.other),
        ),
    )


def parse_deductions(data: Mapping[str, Any], base: Optional[Deductions] = None) -> Deductions:
    base = base or Deductions()
    v = _section(data, "deductions")
    tax = _section(v, "tax")
    insurance = _section(v, "insurance")
    return Deductions(
        tax=TaxDeductions(
            federal=_money(tax, "federal", base.tax.federal),
            state=_money(tax, "state", base.tax.state),
            local=_money(tax, "local", base.tax.local),
        ),
        insurance=InsuranceDeductions(
            health=_money(insurance, "health", base.insurance.health),
            dental=_money(insurance, "dental", base.insurance.dental),
            vision=_money(insurance, "vision", base.insurance.vision),
            life=_money(insurance, "life", base.insurance.life),
        ),
        retirement=_money(v, "retirement", base.retirement),
        other=_money(v, "other", base.other),
    )


def parse_attendance_summary(data: Mapping[str, Any], base: Optional[AttendanceSummary] = None) -> AttendanceSummary:
    base = base or AttendanceSummary()
    v = _section(data, "attendance")

    def _days(key: str) -> int:
        if key not in v:
            return getattr(base, key)
        days = parse_int(v[key], key)
        if days < 0:
            raise ValidationError(f"{key} cannot be negative")
        return days

    return AttendanceSummary(
        working_days=_days("working_days"),
        present_days=_days("present_days"),
        absent_days=_days("absent_days"),
        leave_days=_days("leave_days"),
        total_overtime_hours=parse_float(v["total_overtime_hours"], "total_overtime_hours", minimum=0)
        if "total_overtime_hours" in v
        else base.total_overtime_hours,
    )


def _notes(value: Any) -> Optional[str]:
    text = (str(value).strip() if value is not None else "") or None
    if text and len(text) > MAX_NOTES_LENGTH:
        raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
    return text


def parse_payroll(data: Mapping[str, Any]) -> PayrollRecord:
    """A manually entered payroll record; starts as ``draft`` unless told otherwise."""

    status = parse_enum(PayrollStatus, data.get("status") or PayrollStatus.DRAFT, "status")
    if status in (PayrollStatus.APPROVED, PayrollStatus.PAID):
        raise ValidationError("New payroll records must be draft or calculated")
    return PayrollRecord(
        payroll_id=0,
        employee_id=parse_int(require_field(data, "employee_id", "Employee ID"), "employee_id"),
        period=parse_period(data),
        earnings=parse_earnings(data),
        deductions=parse_deductions(data),
        attendance=parse_attendance_summary(data),
        status=status,
        payment_method=parse_enum(
            PaymentMethod, data.get("payment_method") or PaymentMethod.BANK_TRANSFER, "payment_method"
        ),
        notes=_notes(data.get("notes")),
    )


def apply_payroll_changes(record: PayrollRecord, data: Mapping[str, Any]) -> PayrollRecord:
    """Editable parts only; period, employee and status are fixed once created."""

    changes: dict = {
        "earnings": parse_earnings(data, record.earnings),
        "deductions": parse_deductions(data, record.deductions),
        "attendance": parse_attendance_summary(data, record.attendance),
    }
    if "payment_method" in data:
        changes["payment_method"] = parse_enum(PaymentMethod, data["payment_method"], "payment_method")
    if "payment_date" in data:
        changes["payment_date"] = parse_optional_date(data["payment_date"], "payment_date")
    if "notes" in data:
        changes["notes"] = _notes(data["notes"])
    return replace(record, **changes)
