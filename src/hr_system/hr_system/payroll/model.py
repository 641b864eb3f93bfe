from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceSummary
from ..common.money import money_sum
from ..core.enums import PaymentMethod, PayrollStatus

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PayPeriod:
    month: int
    year: int
    start_date: date
    end_date: date


@dataclass(frozen=True)
class OvertimePay:
    hours: float = 0.0
    rate: Decimal = ZERO
    amount: Decimal = ZERO


@dataclass(frozen=True)
class Bonuses:
    performance: Decimal = ZERO
    holiday: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return money_sum((self.performance, self.holiday, self.other))


@dataclass(frozen=True)
class Allowances:
    transport: Decimal = ZERO
    meal: Decimal = ZERO
    housing: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return money_sum((self.transport, self.meal, self.housing, self.other))


@dataclass(frozen=True)
class Earnings:
    base_salary: Decimal = ZERO
    overtime: OvertimePay = field(default_factory=OvertimePay)
    bonuses: Bonuses = field(default_factory=Bonuses)
    allowances: Allowances = field(default_factory=Allowances)


@dataclass(frozen=True)
class TaxDeductions:
    federal: Decimal = ZERO
    state: Decimal = ZERO
    local: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return money_sum((self.federal, self.state, self.local))


@dataclass(frozen=True)
class InsuranceDeductions:
    health: Decimal = ZERO
    dental: Decimal = ZERO
    vision: Decimal = ZERO
    life: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return money_sum((self.health, self.dental, self.vision, self.life))


@dataclass(frozen=True)
class Deductions:
    tax: TaxDeductions = field(default_factory=TaxDeductions)
    insurance: InsuranceDeductions = field(default_factory=InsuranceDeductions)
    retirement: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class PayCalculations:
    gross_pay: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net_pay: Decimal = ZERO


@dataclass(frozen=True)
class PayrollRecord:
    """One record per (employee, month, year).

    ``calculations`` and the overtime amount are derived and recomputed on
    every save. ``net_pay`` may be negative.
    """

    payroll_id: int
    employee_id: int
    period: PayPeriod
    earnings: Earnings = field(default_factory=Earnings)
    deductions: Deductions = field(default_factory=Deductions)
    attendance: AttendanceSummary = field(default_factory=AttendanceSummary)
    calculations: PayCalculations = field(default_factory=PayCalculations)
    status: PayrollStatus = PayrollStatus.DRAFT
    processed_by: Optional[int] = None
    processed_date: Optional[datetime] = None
    payment_date: Optional[date] = None
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    notes: Optional[str] = None


@dataclass(frozen=True)
class PayrollFilter:
    employee_id: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    status: Optional[PayrollStatus] = None


@dataclass(frozen=True)
class Payslip:
    payslip_number: str
    generated_date: datetime
    employee_code: str
    employee_name: str
    payroll: PayrollRecord
