from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from ..common.pagination import PageRequest
from ..core.enums import AttendanceStatus, CheckLocation
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_total, fetchall, fetchone, from_json, to_json, where_clause
from .model import AttendanceFilter, AttendanceRecord, BreakInterval, CheckPoint, Coordinates
from .repository import AttendanceRepository

ATTENDANCE_COLUMNS = """
    attendance_id, employee_id, work_date,
    check_in_time, check_in_location, check_in_ip, check_in_latitude, check_in_longitude,
    check_out_time, check_out_location, check_out_ip, check_out_latitude, check_out_longitude,
    breaks, working_hours, overtime_hours, status, notes, approved_by, is_manual_entry
"""


def _leg(r: dict, prefix: str) -> Optional[CheckPoint]:
    time = r.get(f"{prefix}_time")
    if time is None:
        return None
    lat, lng = r.get(f"{prefix}_latitude"), r.get(f"{prefix}_longitude")
    return CheckPoint(
        time=time,
        location=CheckLocation(r.get(f"{prefix}_location") or CheckLocation.OFFICE.value),
        ip_address=r.get(f"{prefix}_ip"),
        coordinates=Coordinates(float(lat), float(lng)) if lat is not None and lng is not None else None,
    )


def _leg_values(leg: Optional[CheckPoint]) -> tuple:
    if leg is None:
        return (None, None, None, None, None)
    coords = leg.coordinates
    return (
        leg.time,
        leg.location.value,
        leg.ip_address,
        coords.latitude if coords else None,
        coords.longitude if coords else None,
    )


def _parse_ts(value) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def breaks_to_json(breaks: Sequence[BreakInterval]) -> str:
    return to_json([{"start": b.start, "end": b.end, "reason": b.reason} for b in breaks])


def breaks_from_json(value) -> Tuple[BreakInterval, ...]:
    items = from_json(value, default=[]) or []
    return tuple(
        BreakInterval(start=_parse_ts(b.get("start")), end=_parse_ts(b.get("end")), reason=b.get("reason"))
        for b in items
    )


def row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in=_leg(r, "check_in"),
        check_out=_leg(r, "check_out"),
        breaks=breaks_from_json(r.get("breaks")),
        working_hours=float(r.get("working_hours") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        is_manual_entry=bool(r.get("is_manual_entry")),
    )


def _record_values(record: AttendanceRecord) -> tuple:
    return (
        (record.employee_id, record.work_date)
        + _leg_values(record.check_in)
        + _leg_values(record.check_out)
        + (
            breaks_to_json(record.breaks),
            record.working_hours,
            record.overtime_hours,
            record.status.value,
            record.notes,
            record.approved_by,
            int(record.is_manual_entry),
        )
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {ATTENDANCE_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {ATTENDANCE_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date,
                    check_in_time, check_in_location, check_in_ip, check_in_latitude, check_in_longitude,
                    check_out_time, check_out_location, check_out_ip, check_out_latitude, check_out_longitude,
                    breaks, working_hours, overtime_hours, status, notes, approved_by, is_manual_entry
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _record_values(record),
            )
            new_id = int(cur.lastrowid)
            cur.execute(f"SELECT {ATTENDANCE_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (new_id,))
            return row_to_record(fetchone(cur))

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET employee_id=%s, work_date=%s,
                    check_in_time=%s, check_in_location=%s, check_in_ip=%s,
                    check_in_latitude=%s, check_in_longitude=%s,
                    check_out_time=%s, check_out_location=%s, check_out_ip=%s,
                    check_out_latitude=%s, check_out_longitude=%s,
                    breaks=%s, working_hours=%s, overtime_hours=%s, status=%s, notes=%s,
                    approved_by=%s, is_manual_entry=%s
                WHERE attendance_id=%s
                """,
                _record_values(record) + (record.attendance_id,),
            )
            cur.execute(
                f"SELECT {ATTENDANCE_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (record.attendance_id,),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError("Attendance record not found")
            return row_to_record(r)

    def fill_check_in(self, attendance_id: int, check_in: CheckPoint) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_location=%s, check_in_ip=%s,
                    check_in_latitude=%s, check_in_longitude=%s
                WHERE attendance_id=%s AND check_in_time IS NULL
                """,
                _leg_values(check_in) + (int(attendance_id),),
            )
            return cur.rowcount > 0

    def fill_check_out(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_location=%s, check_out_ip=%s,
                    check_out_latitude=%s, check_out_longitude=%s,
                    working_hours=%s, overtime_hours=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                _leg_values(record.check_out)
                + (record.working_hours, record.overtime_hours, record.attendance_id),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list(self, filters: AttendanceFilter, page: PageRequest) -> Tuple[List[AttendanceRecord], int]:
        clauses: list[str] = []
        params: list = []
        if filters.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.work_date is not None:
            clauses.append("work_date=%s")
            params.append(filters.work_date)
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        where = where_clause(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records {where}", tuple(params))
            total = fetch_total(cur)
            cur.execute(
                f"""
                SELECT {ATTENDANCE_COLUMNS} FROM attendance_records {where}
                ORDER BY work_date DESC, attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            return [row_to_record(r) for r in fetchall(cur)], total

    def list_between(
        self,
        start_date: date,
        end_date: date,
        *,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> List[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list = [start_date, end_date]
        if employee_ids is not None:
            if not employee_ids:
                return []
            clauses.append(f"employee_id IN ({', '.join(['%s'] * len(employee_ids))})")
            params.extend(int(i) for i in employee_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ATTENDANCE_COLUMNS} FROM attendance_records {where_clause(clauses)}
                ORDER BY work_date, employee_id
                """,
                tuple(params),
            )
            return [row_to_record(r) for r in fetchall(cur)]
