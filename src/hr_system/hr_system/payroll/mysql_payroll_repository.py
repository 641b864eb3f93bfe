from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceSummary
from ..common.pagination import PageRequest
from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_total, fetchall, fetchone, where_clause
from .model import (
    Allowances,
    Bonuses,
    Deductions,
    Earnings,
    InsuranceDeductions,
    OvertimePay,
    PayCalculations,
    PayPeriod,
    PayrollFilter,
    PayrollRecord,
    TaxDeductions,
)
from .repository import PayrollRepository

PAYROLL_FIELDS = [
    "employee_id",
    "month",
    "year",
    "period_start",
    "period_end",
    "base_salary",
    "overtime_hours",
    "overtime_rate",
    "overtime_amount",
    "bonus_performance",
    "bonus_holiday",
    "bonus_other",
    "allowance_transport",
    "allowance_meal",
    "allowance_housing",
    "allowance_other",
    "tax_federal",
    "tax_state",
    "tax_local",
    "insurance_health",
    "insurance_dental",
    "insurance_vision",
    "insurance_life",
    "retirement",
    "other_deductions",
    "working_days",
    "present_days",
    "absent_days",
    "leave_days",
    "total_overtime_hours",
    "gross_pay",
    "total_deductions",
    "net_pay",
    "status",
    "processed_by",
    "processed_date",
    "payment_date",
    "payment_method",
    "notes",
]

PAYROLL_COLUMNS = ", ".join(["payroll_id"] + PAYROLL_FIELDS)


def _d(value) -> Decimal:
    return Decimal(value if value is not None else 0)


def row_to_payroll(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        period=PayPeriod(
            month=int(r["month"]),
            year=int(r["year"]),
            start_date=r["period_start"],
            end_date=r["period_end"],
        ),
        earnings=Earnings(
            base_salary=_d(r["base_salary"]),
            overtime=OvertimePay(
                hours=float(r.get("overtime_hours") or 0),
                rate=_d(r["overtime_rate"]),
                amount=_d(r["overtime_amount"]),
            ),
            bonuses=Bonuses(
                performance=_d(r["bonus_performance"]),
                holiday=_d(r["bonus_holiday"]),
                other=_d(r["bonus_other"]),
            ),
            allowances=Allowances(
                transport=_d(r["allowance_transport"]),
                meal=_d(r["allowance_meal"]),
                housing=_d(r["allowance_housing"]),
                other=_d(r["allowance_other"]),
            ),
        ),
        deductions=Deductions(
            tax=TaxDeductions(federal=_d(r["tax_federal"]), state=_d(r["tax_state"]), local=_d(r["tax_local"])),
            insurance=InsuranceDeductions(
                health=_d(r["insurance_health"]),
                dental=_d(r["insurance_dental"]),
                vision=_d(r["insurance_vision"]),
                life=_d(r["insurance_life"]),
            ),
            retirement=_d(r["retirement"]),
            other=_d(r["other_deductions"]),
        ),
        attendance=AttendanceSummary(
            working_days=int(r.get("working_days") or 0),
            present_days=int(r.get("present_days") or 0),
            absent_days=int(r.get("absent_days") or 0),
            leave_days=int(r.get("leave_days") or 0),
            total_overtime_hours=float(r.get("total_overtime_hours") or 0),
        ),
        calculations=PayCalculations(
            gross_pay=_d(r["gross_pay"]),
            total_deductions=_d(r["total_deductions"]),
            net_pay=_d(r["net_pay"]),
        ),
        status=PayrollStatus(r["status"]),
        processed_by=int(r["processed_by"]) if r.get("processed_by") is not None else None,
        processed_date=r.get("processed_date"),
        payment_date=r.get("payment_date"),
        payment_method=PaymentMethod(r.get("payment_method") or PaymentMethod.BANK_TRANSFER.value),
        notes=r.get("notes"),
    )


def _values(p: PayrollRecord) -> tuple:
    e, d, a, c = p.earnings, p.deductions, p.attendance, p.calculations
    return (
        p.employee_id,
        p.period.month,
        p.period.year,
        p.period.start_date,
        p.period.end_date,
        e.base_salary,
        e.overtime.hours,
        e.overtime.rate,
        e.overtime.amount,
        e.bonuses.performance,
        e.bonuses.holiday,
        e.bonuses.other,
        e.allowances.transport,
        e.allowances.meal,
        e.allowances.housing,
        e.allowances.other,
        d.tax.federal,
        d.tax.state,
        d.tax.local,
        d.insurance.health,
        d.insurance.dental,
        d.insurance.vision,
        d.insurance.life,
        d.retirement,
        d.other,
        a.working_days,
        a.present_days,
        a.absent_days,
        a.leave_days,
        a.total_overtime_hours,
        c.gross_pay,
        c.total_deductions,
        c.net_pay,
        p.status.value,
        p.processed_by,
        p.processed_date,
        p.payment_date,
        p.payment_method.value,
        p.notes,
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, payroll_id: int) -> Optional[PayrollRecord]:
        cur.execute(f"SELECT {PAYROLL_COLUMNS} FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
        r = fetchone(cur)
        return row_to_payroll(r) if r else None

    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, payroll_id)

    def get_for_period(self, employee_id: int, month: int, year: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {PAYROLL_COLUMNS} FROM payroll_records WHERE employee_id=%s AND month=%s AND year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return row_to_payroll(r) if r else None

    def create(self, record: PayrollRecord) -> PayrollRecord:
        placeholders = ",".join(["%s"] * len(PAYROLL_FIELDS))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO payroll_records({', '.join(PAYROLL_FIELDS)}) VALUES({placeholders})",
                _values(record),
            )
            return self._select_one(cur, int(cur.lastrowid))

    def update(self, record: PayrollRecord) -> PayrollRecord:
        assignments = ", ".join(f"{name}=%s" for name in PAYROLL_FIELDS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_records SET {assignments} WHERE payroll_id=%s",
                _values(record) + (record.payroll_id,),
            )
            updated = self._select_one(cur, record.payroll_id)
            if not updated:
                raise NotFoundError("Payroll record not found")
            return updated

    def delete(self, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
            return cur.rowcount > 0

    def transition(
        self,
        payroll_id: int,
        *,
        expected: Sequence[PayrollStatus],
        status: PayrollStatus,
        processed_by: Optional[int] = None,
        processed_date: Optional[datetime] = None,
        payment_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> bool:
        expected_placeholders = ", ".join(["%s"] * len(expected))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE payroll_records
                SET status=%s,
                    processed_by=COALESCE(%s, processed_by),
                    processed_date=COALESCE(%s, processed_date),
                    payment_date=COALESCE(%s, payment_date),
                    payment_method=COALESCE(%s, payment_method)
                WHERE payroll_id=%s AND status IN ({expected_placeholders})
                """,
                (
                    status.value,
                    processed_by,
                    processed_date,
                    payment_date,
                    payment_method.value if payment_method else None,
                    int(payroll_id),
                )
                + tuple(s.value for s in expected),
            )
            return cur.rowcount > 0

    def list(
        self,
        filters: PayrollFilter,
        page: PageRequest,
        *,
        statuses: Optional[Sequence[PayrollStatus]] = None,
    ) -> Tuple[List[PayrollRecord], int]:
        clauses: list[str] = []
        params: list = []
        if filters.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.month is not None:
            clauses.append("month=%s")
            params.append(int(filters.month))
        if filters.year is not None:
            clauses.append("year=%s")
            params.append(int(filters.year))
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if statuses:
            clauses.append(f"status IN ({', '.join(['%s'] * len(statuses))})")
            params.extend(s.value for s in statuses)
        where = where_clause(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM payroll_records {where}", tuple(params))
            total = fetch_total(cur)
            cur.execute(
                f"""
                SELECT {PAYROLL_COLUMNS} FROM payroll_records {where}
                ORDER BY year DESC, month DESC, payroll_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            return [row_to_payroll(r) for r in fetchall(cur)], total

    def list_for_year(self, year: int, statuses: Sequence[PayrollStatus]) -> List[PayrollRecord]:
        if not statuses:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {PAYROLL_COLUMNS} FROM payroll_records
                WHERE year=%s AND status IN ({', '.join(['%s'] * len(statuses))})
                ORDER BY month
                """,
                (int(year),) + tuple(s.value for s in statuses),
            )
            return [row_to_payroll(r) for r in fetchall(cur)]
