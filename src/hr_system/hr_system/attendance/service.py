from __future__ import annotations

import csv
import io
import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from ..auth.authorizer import Action, Actor, can_perform, require_action
from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.policy import AttendancePolicy
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .calculator.base import WorkingHoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .model import AttendanceFilter, AttendanceRecord, AttendanceSummary, CheckPoint
from .payload import apply_attendance_changes, check_legs_in_order, parse_manual_entry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

REPORT_FIELDS = [
    "work_date",
    "employee_id",
    "employee_code",
    "employee_name",
    "department_id",
    "check_in",
    "check_out",
    "working_hours",
    "overtime_hours",
    "status",
    "notes",
]


@dataclass(frozen=True)
class AttendanceStats:
    today: Dict[str, int]
    total_working_hours: float
    total_overtime_hours: float
    average_working_hours: float


@dataclass(frozen=True)
class AttendanceReport:
    start: date
    end: date
    rows: List[dict] = field(default_factory=list)
    summary: List[dict] = field(default_factory=list)

    def to_csv(self) -> str:
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in self.rows:
            writer.writerow(row)
        return out.getvalue()


class AttendanceService:
    """Attendance ledger: one record per employee and day.

    Check-in creates the record or fills its empty check-in leg, check-out
    fills the other leg and recomputes hours. Derived hours are recomputed on
    every write; values supplied by callers are not trusted.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        policy: Optional[AttendancePolicy] = None,
        calculator: Optional[WorkingHoursCalculator] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._policy = policy or AttendancePolicy()
        self._calculator = calculator or StandardHoursCalculator(self._policy.standard_work_hours)

    def recompute_hours(self, record: AttendanceRecord) -> AttendanceRecord:
        working, overtime = self._calculator.hours(record)
        return replace(record, working_hours=working, overtime_hours=overtime)

    def record_check_in(self, employee_id: int, day: date, check_in: CheckPoint) -> AttendanceRecord:
        existing = self._attendance.get_for_employee_and_date(employee_id, day)
        if existing is None:
            try:
                record = self._attendance.create(
                    AttendanceRecord(
                        attendance_id=0,
                        employee_id=employee_id,
                        work_date=day,
                        check_in=check_in,
                        status=AttendanceStatus.PRESENT,
                    )
                )
            except ConflictError as e:
                # Another check-in for the same day won the unique key.
                logger.warning("Concurrent check-in rejected for employee %s on %s", employee_id, day)
                raise ConflictError("Already checked in today") from e
        elif existing.check_in is not None:
            raise ConflictError("Already checked in today")
        else:
            if not self._attendance.fill_check_in(existing.attendance_id, check_in):
                raise ConflictError("Already checked in today")
            record = replace(existing, check_in=check_in)

        logger.info("Employee %s checked in at %s", employee_id, check_in.time.isoformat())
        return record

    def record_check_out(self, employee_id: int, day: date, check_out: CheckPoint) -> AttendanceRecord:
        existing = self._attendance.get_for_employee_and_date(employee_id, day)
        if existing is None or existing.check_in is None:
            raise NotFoundError("No check-in record found for today")
        if existing.check_out is not None:
            raise ConflictError("Already checked out today")

        record = replace(existing, check_out=check_out)
        check_legs_in_order(record)
        record = self.recompute_hours(record)
        if not self._attendance.fill_check_out(record):
            raise ConflictError("Already checked out today")

        logger.info("Employee %s checked out, worked %.2fh", employee_id, record.working_hours)
        return record

    def check_in(self, actor: Actor, details: CheckPoint) -> AttendanceRecord:
        employee = self._employee_for(actor)
        return self.record_check_in(employee.employee_id, details.time.date(), details)

    def check_out(self, actor: Actor, details: CheckPoint) -> AttendanceRecord:
        employee = self._employee_for(actor)
        return self.record_check_out(employee.employee_id, details.time.date(), details)

    def create_manual(self, actor: Actor, data: Mapping[str, Any]) -> AttendanceRecord:
        require_action(actor.role, Action.ATTENDANCE_MANAGE)
        record = parse_manual_entry(data)
        if not self._employees.get(record.employee_id):
            raise NotFoundError("Employee not found")
        if self._attendance.get_for_employee_and_date(record.employee_id, record.work_date):
            raise ConflictError("Attendance already recorded for this employee on this date")

        approver = self._employees.get_by_user_id(actor.user_id)
        record = self.recompute_hours(replace(record, approved_by=approver.employee_id if approver else None))
        created = self._attendance.create(record)
        logger.info(
            "Manual attendance for employee %s on %s by user %s",
            created.employee_id,
            created.work_date,
            actor.user_id,
        )
        return created

    def update_record(self, actor: Actor, attendance_id: int, data: Mapping[str, Any]) -> AttendanceRecord:
        require_action(actor.role, Action.ATTENDANCE_MANAGE)
        current = self._get(attendance_id)
        return self._attendance.update(self.recompute_hours(apply_attendance_changes(current, data)))

    def delete_record(self, actor: Actor, attendance_id: int) -> None:
        require_action(actor.role, Action.ATTENDANCE_MANAGE)
        if not self._attendance.delete(attendance_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Attendance record %s deleted by user %s", attendance_id, actor.user_id)

    def get(self, actor: Actor, attendance_id: int) -> AttendanceRecord:
        record = self._get(attendance_id)
        if not can_perform(actor.role, Action.ATTENDANCE_VIEW_ALL):
            own = self._employees.get_by_user_id(actor.user_id)
            if not own or own.employee_id != record.employee_id:
                raise AuthorizationError("Not authorized to view this attendance record")
        return record

    def list(self, actor: Actor, filters: AttendanceFilter, page: PageRequest) -> Page[AttendanceRecord]:
        require_action(actor.role, Action.ATTENDANCE_VIEW_ALL)
        items, total = self._attendance.list(filters, page)
        return Page(items=items, total=total, request=page)

    def list_mine(self, actor: Actor, page: PageRequest) -> Page[AttendanceRecord]:
        employee = self._employee_for(actor)
        items, total = self._attendance.list(AttendanceFilter(employee_id=employee.employee_id), page)
        return Page(items=items, total=total, request=page)

    def stats_overview(self, actor: Actor, *, today: Optional[date] = None) -> AttendanceStats:
        """Today's counts by status plus totals from the 1st of the month up to yesterday."""

        require_action(actor.role, Action.ATTENDANCE_VIEW_ALL)
        today = today or now_local().date()

        todays = self._attendance.list_between(today, today)
        counts = Counter(r.status.value for r in todays)

        month_start = today.replace(day=1)
        month = self._attendance.list_between(month_start, today - timedelta(days=1)) if today > month_start else []
        total_hours = sum(r.working_hours for r in month)
        return AttendanceStats(
            today=dict(counts),
            total_working_hours=round(total_hours, 2),
            total_overtime_hours=round(sum(r.overtime_hours for r in month), 2),
            average_working_hours=round(total_hours / len(month), 2) if month else 0.0,
        )

    def summarize_period(self, employee_id: int, start: date, end: date) -> AttendanceSummary:
        records = self._attendance.list_between(start, end, employee_ids=[employee_id])
        return AttendanceSummary(
            working_days=len(records),
            present_days=sum(1 for r in records if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)),
            absent_days=sum(1 for r in records if r.status == AttendanceStatus.ABSENT),
            leave_days=sum(1 for r in records if r.status == AttendanceStatus.ON_LEAVE),
            total_overtime_hours=sum(r.overtime_hours for r in records),
        )

    def build_report(
        self,
        actor: Actor,
        *,
        start: date,
        end: date,
        department_id: Optional[int] = None,
    ) -> AttendanceReport:
        require_action(actor.role, Action.ATTENDANCE_MANAGE)
        if start > end:
            raise ValidationError("Start date must be before end date")

        employee_ids = None
        if department_id is not None:
            employee_ids = [e.employee_id for e in self._employees.list_active_in_department(department_id)]
        records = self._attendance.list_between(start, end, employee_ids=employee_ids)

        employees: Dict[int, Optional[Employee]] = {}
        rows: List[dict] = []
        summary_map: Dict[int, dict] = {}

        for r in records:
            if r.employee_id not in employees:
                employees[r.employee_id] = self._employees.get(r.employee_id)
            emp = employees[r.employee_id]

            rows.append(
                {
                    "work_date": r.work_date.isoformat(),
                    "employee_id": r.employee_id,
                    "employee_code": emp.employee_code if emp else "-",
                    "employee_name": emp.full_name if emp else "-",
                    "department_id": emp.job.department_id if emp else "",
                    "check_in": _hhmm(r.check_in.time if r.check_in else None),
                    "check_out": _hhmm(r.check_out.time if r.check_out else None),
                    "working_hours": round(r.working_hours, 2),
                    "overtime_hours": round(r.overtime_hours, 2),
                    "status": r.status.value,
                    "notes": r.notes or "",
                }
            )

            s = summary_map.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "employee_code": emp.employee_code if emp else "-",
                    "employee_name": emp.full_name if emp else "-",
                    "days": 0,
                    "present_days": 0,
                    "working_hours": 0.0,
                    "overtime_hours": 0.0,
                }
                summary_map[r.employee_id] = s
            s["days"] += 1
            if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
                s["present_days"] += 1
            s["working_hours"] += r.working_hours
            s["overtime_hours"] += r.overtime_hours

        summary = []
        for s in summary_map.values():
            s["working_hours"] = round(s["working_hours"], 2)
            s["overtime_hours"] = round(s["overtime_hours"], 2)
            summary.append(s)
        summary.sort(key=lambda x: x["working_hours"], reverse=True)

        return AttendanceReport(start=start, end=end, rows=rows, summary=summary)

    def _get(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def _employee_for(self, actor: Actor) -> Employee:
        employee = self._employees.get_by_user_id(actor.user_id)
        if not employee:
            raise NotFoundError("Employee profile not found")
        return employee


def _hhmm(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else "-"
