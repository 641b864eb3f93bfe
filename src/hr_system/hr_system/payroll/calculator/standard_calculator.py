from __future__ import annotations

from decimal import Decimal

from ...common.money import money_sum, to_decimal, to_money, to_rate
from ...core.policy import PayrollPolicy
from ...employees.model import Benefits
from ..model import (
    ZERO,
    Deductions,
    Earnings,
    InsuranceDeductions,
    OvertimePay,
    PayCalculations,
    TaxDeductions,
)
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule.

    Overtime hourly rate: base / (days_per_month * hours_per_day) * multiplier.
    Taxes and retirement are flat percentages of the base salary; health
    insurance is a fixed premium for enrolled employees.
    """

    def overtime_rate(self, base_salary: Decimal, policy: PayrollPolicy) -> Decimal:
        hours_per_month = Decimal(policy.days_per_month) * Decimal(policy.hours_per_day)
        return to_rate(to_decimal(base_salary) / hours_per_month * policy.overtime_multiplier)

    def overtime_amount(self, hours: float, rate: Decimal) -> Decimal:
        return to_money(to_decimal(hours) * to_decimal(rate))

    def overtime(self, base_salary: Decimal, hours: float, policy: PayrollPolicy) -> OvertimePay:
        rate = self.overtime_rate(base_salary, policy)
        return OvertimePay(hours=float(hours), rate=rate, amount=self.overtime_amount(hours, rate))

    def statutory_deductions(self, base_salary: Decimal, benefits: Benefits, policy: PayrollPolicy) -> Deductions:
        base = to_decimal(base_salary)
        return Deductions(
            tax=TaxDeductions(
                federal=to_money(base * policy.federal_tax_rate),
                state=to_money(base * policy.state_tax_rate),
                local=to_money(base * policy.local_tax_rate),
            ),
            insurance=InsuranceDeductions(
                health=to_money(policy.health_insurance_premium) if benefits.health_insurance else ZERO,
            ),
            retirement=to_money(base * policy.retirement_rate),
            other=ZERO,
        )

    def totals(self, earnings: Earnings, deductions: Deductions) -> PayCalculations:
        gross = money_sum(
            (
                earnings.base_salary,
                earnings.overtime.amount,
                earnings.bonuses.total,
                earnings.allowances.total,
            )
        )
        total_deductions = money_sum(
            (
                deductions.tax.total,
                deductions.insurance.total,
                deductions.retirement,
                deductions.other,
            )
        )
        return PayCalculations(
            gross_pay=gross,
            total_deductions=total_deductions,
            net_pay=to_money(gross - total_deductions),
        )
