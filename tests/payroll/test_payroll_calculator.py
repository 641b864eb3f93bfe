from decimal import Decimal

from src.hr_system.hr_system.core.policy import PayrollPolicy
from src.hr_system.hr_system.employees.model import Benefits
from src.hr_system.hr_system.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.hr_system.hr_system.payroll.model import (
    Allowances,
    Bonuses,
    Deductions,
    Earnings,
    InsuranceDeductions,
    OvertimePay,
    TaxDeductions,
)


def test_overtime_rate_uses_fixed_30_day_8_hour_month():
    calc = StandardPayrollCalculator()
    overtime = calc.overtime(Decimal("3000"), 10, PayrollPolicy())

    assert overtime.rate == Decimal("18.75")
    assert overtime.amount == Decimal("187.50")
    assert overtime.hours == 10.0


def test_statutory_deductions_for_enrolled_employee():
    deductions = StandardPayrollCalculator().statutory_deductions(
        Decimal("3000"), Benefits(health_insurance=True), PayrollPolicy()
    )

    assert deductions.tax == TaxDeductions(federal=Decimal("450"), state=Decimal("150"), local=Decimal("0"))
    assert deductions.insurance.health == Decimal("200")
    assert deductions.retirement == Decimal("180")


def test_no_health_premium_without_enrolment():
    deductions = StandardPayrollCalculator().statutory_deductions(Decimal("3000"), Benefits(), PayrollPolicy())
    assert deductions.insurance.total == Decimal("0")


def test_totals_sum_every_component():
    earnings = Earnings(
        base_salary=Decimal("2000"),
        overtime=OvertimePay(hours=2, rate=Decimal("10"), amount=Decimal("20")),
        bonuses=Bonuses(performance=Decimal("100"), holiday=Decimal("50")),
        allowances=Allowances(transport=Decimal("30"), meal=Decimal("20"), housing=Decimal("100")),
    )
    deductions = Deductions(
        tax=TaxDeductions(federal=Decimal("300"), state=Decimal("100"), local=Decimal("10")),
        insurance=InsuranceDeductions(health=Decimal("200"), dental=Decimal("15")),
        retirement=Decimal("120"),
        other=Decimal("5"),
    )
    totals = StandardPayrollCalculator().totals(earnings, deductions)

    assert totals.gross_pay == Decimal("2320.00")
    assert totals.total_deductions == Decimal("750.00")
    assert totals.net_pay == Decimal("1570.00")


def test_net_pay_may_be_negative():
    totals = StandardPayrollCalculator().totals(
        Earnings(base_salary=Decimal("100")),
        Deductions(other=Decimal("250")),
    )
    assert totals.net_pay == Decimal("-150.00")


def test_policy_rates_are_injectable():
    policy = PayrollPolicy.from_mapping({"federal_tax_rate": "0.10", "overtime_multiplier": "2", "days_per_month": "25"})
    calc = StandardPayrollCalculator()

    assert calc.overtime(Decimal("2000"), 1, policy).rate == Decimal("20")
    assert calc.statutory_deductions(Decimal("2000"), Benefits(), policy).tax.federal == Decimal("200")
