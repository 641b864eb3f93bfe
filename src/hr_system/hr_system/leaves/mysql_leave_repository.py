from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import List, Optional, Tuple

from ..common.pagination import PageRequest
from ..core.enums import HalfDayPeriod, LeaveStatus, LeaveType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_total, fetchall, fetchone, from_json, to_json, where_clause
from .model import EmergencyContact, LeaveFilter, LeaveRequest
from .repository import LeaveRepository

LEAVE_COLUMNS = """
    leave_id, employee_id, leave_type, start_date, end_date, total_days, reason, status,
    applied_date, approved_by, approved_date, rejection_reason, is_half_day, half_day_period,
    emergency_contact
"""


def row_to_leave(r: dict) -> LeaveRequest:
    contact = from_json(r.get("emergency_contact"))
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        total_days=float(r["total_days"]),
        status=LeaveStatus(r["status"]),
        applied_date=r.get("applied_date"),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_date=r.get("approved_date"),
        rejection_reason=r.get("rejection_reason"),
        is_half_day=bool(r.get("is_half_day")),
        half_day_period=HalfDayPeriod(r["half_day_period"]) if r.get("half_day_period") else None,
        emergency_contact=EmergencyContact(**contact) if contact else None,
    )


def _values(leave: LeaveRequest) -> tuple:
    contact = leave.emergency_contact
    return (
        leave.employee_id,
        leave.leave_type.value,
        leave.start_date,
        leave.end_date,
        leave.total_days,
        leave.reason,
        leave.status.value,
        leave.applied_date,
        leave.approved_by,
        leave.approved_date,
        leave.rejection_reason,
        int(leave.is_half_day),
        leave.half_day_period.value if leave.half_day_period else None,
        to_json(asdict(contact)) if contact else None,
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {LEAVE_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return row_to_leave(r) if r else None

    def create(self, leave: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, total_days, reason, status,
                    applied_date, approved_by, approved_date, rejection_reason, is_half_day,
                    half_day_period, emergency_contact
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _values(leave),
            )
            new_id = int(cur.lastrowid)
            cur.execute(f"SELECT {LEAVE_COLUMNS} FROM leave_requests WHERE leave_id=%s", (new_id,))
            return row_to_leave(fetchone(cur))

    def update(self, leave: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET employee_id=%s, leave_type=%s, start_date=%s, end_date=%s, total_days=%s,
                    reason=%s, status=%s, applied_date=%s, approved_by=%s, approved_date=%s,
                    rejection_reason=%s, is_half_day=%s, half_day_period=%s, emergency_contact=%s
                WHERE leave_id=%s
                """,
                _values(leave) + (leave.leave_id,),
            )
            cur.execute(f"SELECT {LEAVE_COLUMNS} FROM leave_requests WHERE leave_id=%s", (leave.leave_id,))
            r = fetchone(cur)
            if not r:
                raise NotFoundError("Leave request not found")
            return row_to_leave(r)

    def delete(self, leave_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            return cur.rowcount > 0

    def transition(
        self,
        leave_id: int,
        *,
        expected: LeaveStatus,
        status: LeaveStatus,
        approved_by: Optional[int] = None,
        approved_date: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s,
                    approved_by=COALESCE(%s, approved_by),
                    approved_date=COALESCE(%s, approved_date),
                    rejection_reason=COALESCE(%s, rejection_reason)
                WHERE leave_id=%s AND status=%s
                """,
                (status.value, approved_by, approved_date, rejection_reason, int(leave_id), expected.value),
            )
            return cur.rowcount > 0

    def list(self, filters: LeaveFilter, page: PageRequest) -> Tuple[List[LeaveRequest], int]:
        clauses: list[str] = []
        params: list = []
        if filters.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if filters.leave_type is not None:
            clauses.append("leave_type=%s")
            params.append(filters.leave_type.value)
        where = where_clause(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leave_requests {where}", tuple(params))
            total = fetch_total(cur)
            cur.execute(
                f"""
                SELECT {LEAVE_COLUMNS} FROM leave_requests {where}
                ORDER BY applied_date DESC, leave_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            return [row_to_leave(r) for r in fetchall(cur)], total

    def list_approved_starting_between(self, employee_id: int, start: date, end: date) -> List[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {LEAVE_COLUMNS} FROM leave_requests
                WHERE employee_id=%s AND status=%s AND start_date BETWEEN %s AND %s
                """,
                (int(employee_id), LeaveStatus.APPROVED.value, start, end),
            )
            return [row_to_leave(r) for r in fetchall(cur)]

    def list_applied_between(self, start: datetime, end: datetime) -> List[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {LEAVE_COLUMNS} FROM leave_requests WHERE applied_date >= %s AND applied_date < %s",
                (start, end),
            )
            return [row_to_leave(r) for r in fetchall(cur)]
