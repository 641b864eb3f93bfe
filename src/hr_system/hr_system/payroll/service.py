from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..attendance.service import AttendanceService
from ..auth.authorizer import Action, Actor, can_perform, require_action
from ..common.datetime_utils import month_bounds, now_local
from ..common.money import money_sum, to_money
from ..common.pagination import Page, PageRequest
from ..common.validators import parse_enum
from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.policy import PayrollPolicy
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Earnings, PayPeriod, PayrollFilter, PayrollRecord, Payslip
from .payload import apply_payroll_changes, parse_payroll
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

SETTLED_STATUSES = (PayrollStatus.APPROVED, PayrollStatus.PAID)
FROZEN_STATUSES = (PayrollStatus.PAID, PayrollStatus.CANCELLED)


@dataclass(frozen=True)
class PayrollTotals:
    count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    average_net: Decimal

    @classmethod
    def of(cls, records: Iterable[PayrollRecord]) -> "PayrollTotals":
        records = list(records)
        total_net = money_sum(r.calculations.net_pay for r in records)
        return cls(
            count=len(records),
            total_gross=money_sum(r.calculations.gross_pay for r in records),
            total_deductions=money_sum(r.calculations.total_deductions for r in records),
            total_net=total_net,
            average_net=to_money(total_net / len(records)) if records else Decimal("0.00"),
        )


@dataclass(frozen=True)
class PayrollStats:
    year: int
    month: int
    current_month: PayrollTotals
    year_to_date: PayrollTotals
    monthly_trends: Dict[int, PayrollTotals]


class PayrollService:
    """Monthly payroll per employee.

    Lifecycle: draft -> calculated -> approved -> paid, with ``cancelled`` as
    a terminal side exit. Status changes are conditional writes, so a second
    approve or pay of the same record is refused.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeRepository,
        attendance: AttendanceService,
        *,
        policy: Optional[PayrollPolicy] = None,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._employees = employees
        self._attendance = attendance
        self._policy = policy or PayrollPolicy()
        self._calculator = calculator or StandardPayrollCalculator()

    def recompute_totals(self, record: PayrollRecord, *, policy: Optional[PayrollPolicy] = None) -> PayrollRecord:
        """Re-derive the overtime amount and gross/deductions/net."""

        policy = policy or self._policy
        overtime = record.earnings.overtime
        if overtime.rate <= 0:
            overtime = self._calculator.overtime(record.earnings.base_salary, overtime.hours, policy)
        else:
            overtime = replace(overtime, amount=self._calculator.overtime_amount(overtime.hours, overtime.rate))
        earnings = replace(record.earnings, overtime=overtime)
        return replace(
            record,
            earnings=earnings,
            calculations=self._calculator.totals(earnings, record.deductions),
        )

    def calculate(
        self,
        actor: Actor,
        employee_id: int,
        month: int,
        year: int,
        *,
        policy: Optional[PayrollPolicy] = None,
    ) -> PayrollRecord:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        policy = policy or self._policy
        employee = self._employees.get(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        start, end = month_bounds(year, month)
        if self._payroll.get_for_period(employee_id, month, year):
            raise ConflictError("Payroll already exists for this period")

        summary = self._attendance.summarize_period(employee_id, start, end)
        base_salary = to_money(employee.salary.base_salary)
        record = PayrollRecord(
            payroll_id=0,
            employee_id=employee_id,
            period=PayPeriod(month=int(month), year=int(year), start_date=start, end_date=end),
            earnings=Earnings(
                base_salary=base_salary,
                overtime=self._calculator.overtime(base_salary, summary.total_overtime_hours, policy),
            ),
            deductions=self._calculator.statutory_deductions(base_salary, employee.benefits, policy),
            attendance=summary,
            status=PayrollStatus.CALCULATED,
            processed_by=actor.user_id,
            processed_date=now_local(),
        )
        record = replace(record, calculations=self._calculator.totals(record.earnings, record.deductions))

        try:
            created = self._payroll.create(record)
        except ConflictError:
            logger.warning("Concurrent payroll calculation for employee %s %s/%s", employee_id, month, year)
            raise ConflictError("Payroll already exists for this period")

        logger.info(
            "Payroll %s calculated for employee %s %02d/%s: net %s",
            created.payroll_id,
            employee_id,
            created.period.month,
            created.period.year,
            created.calculations.net_pay,
        )
        return created

    def create(self, actor: Actor, data: Mapping[str, Any]) -> PayrollRecord:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        record = parse_payroll(data)
        if not self._employees.get(record.employee_id):
            raise NotFoundError("Employee not found")
        if self._payroll.get_for_period(record.employee_id, record.period.month, record.period.year):
            raise ConflictError("Payroll already exists for this period")

        record = replace(record, processed_by=actor.user_id, processed_date=now_local())
        created = self._payroll.create(self.recompute_totals(record))
        logger.info("Payroll %s created for employee %s by user %s", created.payroll_id, created.employee_id, actor.user_id)
        return created

    def update(self, actor: Actor, payroll_id: int, data: Mapping[str, Any]) -> PayrollRecord:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        current = self._get(payroll_id)
        if current.status in FROZEN_STATUSES:
            raise ConflictError(f"Cannot update a {current.status.value} payroll")
        target = parse_enum(PayrollStatus, data["status"], "status") if data.get("status") else current.status
        if target not in (current.status, PayrollStatus.CALCULATED):
            raise ValidationError("Use the approve, pay or cancel actions to change payroll status")

        updated = self._payroll.update(self.recompute_totals(apply_payroll_changes(current, data)))
        if target != updated.status:
            return self.mark_calculated(actor, payroll_id)
        return updated

    def mark_calculated(self, actor: Actor, payroll_id: int) -> PayrollRecord:
        """draft -> calculated, with totals recomputed from the stored figures."""

        require_action(actor.role, Action.PAYROLL_MANAGE)
        record = self._get(payroll_id)
        processed_at = now_local()
        if not self._payroll.transition(
            payroll_id,
            expected=(PayrollStatus.DRAFT,),
            status=PayrollStatus.CALCULATED,
            processed_by=actor.user_id,
            processed_date=processed_at,
        ):
            logger.warning("Payroll %s not marked calculated, status is %s", payroll_id, record.status.value)
            raise ConflictError("Only draft payroll can be marked as calculated")

        record = replace(
            record,
            status=PayrollStatus.CALCULATED,
            processed_by=actor.user_id,
            processed_date=processed_at,
        )
        logger.info("Payroll %s marked calculated by user %s", payroll_id, actor.user_id)
        return self._payroll.update(self.recompute_totals(record))

    def approve(self, actor: Actor, payroll_id: int) -> PayrollRecord:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        record = self._get(payroll_id)
        processed_at = now_local()
        if not self._payroll.transition(
            payroll_id,
            expected=(PayrollStatus.CALCULATED,),
            status=PayrollStatus.APPROVED,
            processed_by=actor.user_id,
            processed_date=processed_at,
        ):
            logger.warning("Payroll %s approval refused, status is not calculated", payroll_id)
            raise ConflictError("Payroll must be calculated before approval")

        logger.info("Payroll %s approved by user %s", payroll_id, actor.user_id)
        return replace(record, status=PayrollStatus.APPROVED, processed_by=actor.user_id, processed_date=processed_at)

    def mark_paid(
        self,
        actor: Actor,
        payroll_id: int,
        *,
        payment_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> PayrollRecord:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        record = self._get(payroll_id)
        paid_on = payment_date or now_local().date()
        method = payment_method or record.payment_method
        if not self._payroll.transition(
            payroll_id,
            expected=(PayrollStatus.APPROVED,),
            status=PayrollStatus.PAID,
            payment_date=paid_on,
            payment_method=method,
        ):
            logger.warning("Payroll %s payment refused, status is not approved", payroll_id)
            raise ConflictError("Payroll must be approved before payment")

        logger.info("Payroll %s paid on %s by user %s", payroll_id, paid_on, actor.user_id)
        return replace(record, status=PayrollStatus.PAID, payment_date=paid_on, payment_method=method)

    def cancel(self, actor: Actor, payroll_id: int) -> PayrollRecord:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        record = self._get(payroll_id)
        if not self._payroll.transition(
            payroll_id,
            expected=(PayrollStatus.DRAFT, PayrollStatus.CALCULATED, PayrollStatus.APPROVED),
            status=PayrollStatus.CANCELLED,
        ):
            raise ConflictError(f"Cannot cancel a {record.status.value} payroll")

        logger.info("Payroll %s cancelled by user %s", payroll_id, actor.user_id)
        return replace(record, status=PayrollStatus.CANCELLED)

    def delete(self, actor: Actor, payroll_id: int) -> None:
        require_action(actor.role, Action.PAYROLL_DELETE)
        if not self._payroll.delete(payroll_id):
            raise NotFoundError("Payroll record not found")
        logger.info("Payroll %s deleted by user %s", payroll_id, actor.user_id)

    def get(self, actor: Actor, payroll_id: int) -> PayrollRecord:
        record = self._get(payroll_id)
        self._require_owner_or_privileged(actor, record, "Not authorized to view this payroll record")
        return record

    def list(self, actor: Actor, filters: PayrollFilter, page: PageRequest) -> Page[PayrollRecord]:
        require_action(actor.role, Action.PAYROLL_MANAGE)
        items, total = self._payroll.list(filters, page)
        return Page(items=items, total=total, request=page)

    def list_mine(self, actor: Actor, page: PageRequest, *, year: Optional[int] = None) -> Page[PayrollRecord]:
        """Own payroll, approved or paid only."""

        employee = self._employee_for(actor)
        items, total = self._payroll.list(
            PayrollFilter(employee_id=employee.employee_id, year=year),
            page,
            statuses=SETTLED_STATUSES,
        )
        return Page(items=items, total=total, request=page)

    def payslip(self, actor: Actor, payroll_id: int) -> Payslip:
        record = self._get(payroll_id)
        self._require_owner_or_privileged(actor, record, "Not authorized to view this payslip")
        employee = self._employees.get(record.employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return Payslip(
            payslip_number=f"PS-{record.period.year}-{record.period.month}-{employee.employee_code}",
            generated_date=now_local(),
            employee_code=employee.employee_code,
            employee_name=employee.full_name,
            payroll=record,
        )

    def stats_overview(self, actor: Actor, year: Optional[int] = None, month: Optional[int] = None) -> PayrollStats:
        """Approved and paid payroll: the given month, year to date and per-month trends."""

        require_action(actor.role, Action.PAYROLL_MANAGE)
        today = now_local()
        year = int(year or today.year)
        month = int(month or today.month)
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")

        records = self._payroll.list_for_year(year, SETTLED_STATUSES)
        by_month: Dict[int, List[PayrollRecord]] = {}
        for r in records:
            by_month.setdefault(r.period.month, []).append(r)

        return PayrollStats(
            year=year,
            month=month,
            current_month=PayrollTotals.of(by_month.get(month, [])),
            year_to_date=PayrollTotals.of(r for r in records if r.period.month <= month),
            monthly_trends={m: PayrollTotals.of(rs) for m, rs in sorted(by_month.items())},
        )

    def _get(self, payroll_id: int) -> PayrollRecord:
        record = self._payroll.get(payroll_id)
        if not record:
            raise NotFoundError("Payroll record not found")
        return record

    def _employee_for(self, actor: Actor) -> Employee:
        employee = self._employees.get_by_user_id(actor.user_id)
        if not employee:
            raise NotFoundError("Employee profile not found")
        return employee

    def _require_owner_or_privileged(self, actor: Actor, record: PayrollRecord, message: str) -> None:
        if can_perform(actor.role, Action.PAYSLIP_VIEW_OTHERS):
            return
        own = self._employees.get_by_user_id(actor.user_id)
        if not own or own.employee_id != record.employee_id:
            raise AuthorizationError(message)
