from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from src.hr_system.hr_system.attendance.model import AttendanceRecord, CheckPoint
from src.hr_system.hr_system.attendance.service import AttendanceService
from src.hr_system.hr_system.core.enums import AttendanceStatus
from src.hr_system.hr_system.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from tests.fakes import InMemoryAttendance

DAY = date(2025, 3, 3)


def _at(hour: int, minute: int = 0, day: date = DAY) -> CheckPoint:
    return CheckPoint(time=datetime(day.year, day.month, day.day, hour, minute))


class StaleReadAttendance(InMemoryAttendance):
    """Every lookup misses, as if two requests read before either wrote."""

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return None


def test_check_in_then_check_out_computes_hours(world):
    svc = world.services.attendance_service
    emp = world.alice.employee_id

    rec = svc.record_check_in(emp, DAY, _at(8))
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.working_hours == 0.0

    rec = svc.record_check_out(emp, DAY, _at(18, 30))
    assert rec.working_hours == 10.5
    assert rec.overtime_hours == 2.5

    stored = world.attendance.get_for_employee_and_date(emp, DAY)
    assert stored.working_hours == 10.5
    assert stored.check_out.time == datetime(2025, 3, 3, 18, 30)


def test_second_check_in_same_day_conflicts(world):
    svc = world.services.attendance_service
    svc.record_check_in(world.alice.employee_id, DAY, _at(8))

    with pytest.raises(ConflictError, match="Already checked in today"):
        svc.record_check_in(world.alice.employee_id, DAY, _at(9))


def test_racing_check_ins_exactly_one_wins(world):
    attendance = StaleReadAttendance()
    svc = AttendanceService(attendance, world.employees)
    emp = world.alice.employee_id

    outcomes = []
    for hour in (8, 8):
        try:
            svc.record_check_in(emp, DAY, _at(hour))
            outcomes.append("ok")
        except ConflictError:
            outcomes.append("conflict")

    assert sorted(outcomes) == ["conflict", "ok"]
    assert len(attendance.by_id) == 1


def test_check_in_fills_empty_leg_of_existing_record(world):
    world.attendance.create(
        AttendanceRecord(attendance_id=0, employee_id=world.alice.employee_id, work_date=DAY, notes="pre-created")
    )
    rec = world.services.attendance_service.record_check_in(world.alice.employee_id, DAY, _at(9))
    assert rec.check_in.time.hour == 9
    assert len(world.attendance.by_id) == 1


def test_check_out_requires_check_in(world):
    with pytest.raises(NotFoundError, match="No check-in record found for today"):
        world.services.attendance_service.record_check_out(world.alice.employee_id, DAY, _at(17))


def test_second_check_out_conflicts(world):
    svc = world.services.attendance_service
    svc.record_check_in(world.alice.employee_id, DAY, _at(8))
    svc.record_check_out(world.alice.employee_id, DAY, _at(17))

    with pytest.raises(ConflictError, match="Already checked out today"):
        svc.record_check_out(world.alice.employee_id, DAY, _at(18))


def test_check_out_before_check_in_is_rejected(world):
    svc = world.services.attendance_service
    svc.record_check_in(world.alice.employee_id, DAY, _at(10))

    with pytest.raises(ValidationError):
        svc.record_check_out(world.alice.employee_id, DAY, _at(9))


def test_manual_entry_recomputes_supplied_hours(world):
    svc = world.services.attendance_service
    rec = svc.create_manual(
        world.actor(world.hr),
        {
            "employee_id": world.bob.employee_id,
            "date": "2025-03-04",
            "check_in": {"time": "2025-03-04T09:00:00"},
            "check_out": {"time": "2025-03-04T19:00:00"},
            "working_hours": 3,
            "breaks": [{"start": "2025-03-04T12:00:00", "end": "2025-03-04T13:00:00"}],
        },
    )
    assert rec.is_manual_entry
    assert rec.working_hours == 9.0
    assert rec.overtime_hours == 1.0
    assert rec.approved_by == world.hr.employee_id


def test_manual_entry_requires_admin_or_hr(world):
    with pytest.raises(AuthorizationError):
        world.services.attendance_service.create_manual(
            world.actor(world.manager),
            {"employee_id": world.alice.employee_id, "date": "2025-03-04"},
        )


def test_update_record_recomputes_hours(world):
    svc = world.services.attendance_service
    svc.record_check_in(world.alice.employee_id, DAY, _at(8))
    rec = svc.record_check_out(world.alice.employee_id, DAY, _at(16))

    updated = svc.update_record(
        world.actor(world.admin),
        rec.attendance_id,
        {"check_out": {"time": "2025-03-03T19:00:00"}, "working_hours": 1},
    )
    assert updated.working_hours == 11.0
    assert updated.overtime_hours == 3.0


def test_employee_cannot_view_someone_elses_record(world):
    svc = world.services.attendance_service
    rec = svc.record_check_in(world.bob.employee_id, DAY, _at(8))

    with pytest.raises(AuthorizationError):
        svc.get(world.actor(world.alice), rec.attendance_id)
    assert svc.get(world.actor(world.bob), rec.attendance_id) == rec


def test_summarize_period_counts_statuses(world):
    emp = world.alice.employee_id
    svc = world.services.attendance_service
    svc.record_check_in(emp, date(2025, 3, 3), _at(8, day=date(2025, 3, 3)))
    svc.record_check_out(emp, date(2025, 3, 3), _at(19, day=date(2025, 3, 3)))
    for day, status in (
        (date(2025, 3, 4), AttendanceStatus.LATE),
        (date(2025, 3, 5), AttendanceStatus.ABSENT),
        (date(2025, 3, 6), AttendanceStatus.ON_LEAVE),
        (date(2025, 4, 1), AttendanceStatus.PRESENT),
    ):
        world.attendance.create(AttendanceRecord(attendance_id=0, employee_id=emp, work_date=day, status=status))

    summary = svc.summarize_period(emp, date(2025, 3, 1), date(2025, 3, 31))
    assert summary.working_days == 4
    assert summary.present_days == 2
    assert summary.absent_days == 1
    assert summary.leave_days == 1
    assert summary.total_overtime_hours == 3.0


def test_stats_overview_covers_month_until_yesterday(world):
    svc = world.services.attendance_service
    today = date(2025, 3, 10)
    svc.record_check_in(world.alice.employee_id, date(2025, 3, 3), _at(8))
    svc.record_check_out(world.alice.employee_id, date(2025, 3, 3), _at(18))
    svc.record_check_in(world.bob.employee_id, today, _at(8, day=today))

    stats = svc.stats_overview(world.actor(world.manager), today=today)
    assert stats.today == {"present": 1}
    assert stats.total_working_hours == 10.0
    assert stats.total_overtime_hours == 2.0
    assert stats.average_working_hours == 10.0


def test_report_csv_has_header_and_rows(world):
    svc = world.services.attendance_service
    svc.record_check_in(world.alice.employee_id, DAY, _at(8))
    svc.record_check_out(world.alice.employee_id, DAY, _at(17))
    svc.record_check_in(world.bob.employee_id, DAY, _at(9))

    report = svc.build_report(
        world.actor(world.hr), start=DAY, end=DAY, department_id=world.engineering.department_id
    )
    assert len(report.rows) == 1
    assert report.summary[0]["working_hours"] == 9.0

    lines = report.to_csv().strip().splitlines()
    assert lines[0].startswith("work_date,employee_id,employee_code")
    assert "08:00" in lines[1] and "17:00" in lines[1]
