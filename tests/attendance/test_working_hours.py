from datetime import date, datetime

from src.hr_system.hr_system.attendance.calculator.standard_calculator import StandardHoursCalculator
from src.hr_system.hr_system.attendance.model import AttendanceRecord, BreakInterval, CheckPoint


def _record(check_in=None, check_out=None, breaks=(), **kwargs):
    return AttendanceRecord(
        attendance_id=1,
        employee_id=1,
        work_date=date(2025, 3, 3),
        check_in=CheckPoint(time=check_in) if check_in else None,
        check_out=CheckPoint(time=check_out) if check_out else None,
        breaks=tuple(breaks),
        **kwargs,
    )


def test_standard_day_has_no_overtime():
    rec = _record(datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 17, 0))
    assert StandardHoursCalculator().hours(rec) == (8.0, 0.0)


def test_overtime_is_time_beyond_standard_day():
    rec = _record(datetime(2025, 3, 3, 8, 0), datetime(2025, 3, 3, 18, 30))
    working, overtime = StandardHoursCalculator().hours(rec)
    assert working == 10.5
    assert overtime == 2.5


def test_closed_breaks_are_subtracted():
    rec = _record(
        datetime(2025, 3, 3, 8, 0),
        datetime(2025, 3, 3, 17, 0),
        breaks=[
            BreakInterval(start=datetime(2025, 3, 3, 12, 0), end=datetime(2025, 3, 3, 12, 45)),
            BreakInterval(start=datetime(2025, 3, 3, 15, 0), end=datetime(2025, 3, 3, 15, 15)),
        ],
    )
    assert StandardHoursCalculator().hours(rec) == (8.0, 0.0)


def test_open_break_is_ignored():
    rec = _record(
        datetime(2025, 3, 3, 8, 0),
        datetime(2025, 3, 3, 16, 0),
        breaks=[BreakInterval(start=datetime(2025, 3, 3, 12, 0))],
    )
    assert StandardHoursCalculator().hours(rec) == (8.0, 0.0)


def test_breaks_longer_than_shift_clamp_to_zero():
    rec = _record(
        datetime(2025, 3, 3, 8, 0),
        datetime(2025, 3, 3, 9, 0),
        breaks=[BreakInterval(start=datetime(2025, 3, 3, 7, 0), end=datetime(2025, 3, 3, 10, 0))],
    )
    assert StandardHoursCalculator().hours(rec) == (0.0, 0.0)


def test_missing_leg_means_no_hours():
    rec = _record(datetime(2025, 3, 3, 8, 0), working_hours=6.0)
    assert StandardHoursCalculator().hours(rec) == (0.0, 0.0)


def test_manual_entry_without_legs_keeps_declared_hours():
    rec = _record(working_hours=9.5, is_manual_entry=True)
    assert StandardHoursCalculator().hours(rec) == (9.5, 1.5)


def test_standard_day_length_is_configurable():
    rec = _record(datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 17, 0))
    assert StandardHoursCalculator(standard_work_hours=7.5).hours(rec) == (8.0, 0.5)
