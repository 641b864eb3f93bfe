from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..common.validators import (
    parse_bool,
    parse_date,
    parse_enum,
    parse_float,
    parse_int,
    parse_optional_datetime,
    require_field,
)
from ..core.enums import AttendanceStatus, CheckLocation
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, BreakInterval, CheckPoint, Coordinates

MAX_NOTES_LENGTH = 500


def parse_coordinates(value: Any) -> Optional[Coordinates]:
    if not value:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError("Coordinates must be an object with latitude and longitude")
    return Coordinates(
        latitude=parse_float(value.get("latitude"), "latitude", minimum=-90, maximum=90),
        longitude=parse_float(value.get("longitude"), "longitude", minimum=-180, maximum=180),
    )


def parse_check_point(
    data: Optional[Mapping[str, Any]],
    *,
    default_time: Optional[datetime] = None,
    ip_address: Optional[str] = None,
) -> Optional[CheckPoint]:
    """Build a check leg; ``default_time`` fills in a missing ``time``."""

    data = data or {}
    time = parse_optional_datetime(data.get("time"), "time") or default_time
    if time is None:
        return None
    return CheckPoint(
        time=time,
        location=parse_enum(CheckLocation, data.get("location") or CheckLocation.OFFICE, "location"),
        ip_address=data.get("ip_address") or ip_address,
        coordinates=parse_coordinates(data.get("coordinates")),
    )


def parse_breaks(items: Any) -> Tuple[BreakInterval, ...]:
    if not items:
        return ()
    if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
        raise ValidationError("Breaks must be a list")
    out = []
    for item in items:
        if not isinstance(item, Mapping):
            raise ValidationError("Each break must be an object")
        interval = BreakInterval(
            start=parse_optional_datetime(item.get("start"), "break start"),
            end=parse_optional_datetime(item.get("end"), "break end"),
            reason=item.get("reason"),
        )
        if interval.is_closed and interval.end < interval.start:
            raise ValidationError("Break end must be after break start")
        out.append(interval)
    return tuple(out)


def _notes(value: Any) -> Optional[str]:
    text = (str(value).strip() if value is not None else "") or None
    if text and len(text) > MAX_NOTES_LENGTH:
        raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
    return text


def check_legs_in_order(record: AttendanceRecord) -> None:
    if record.check_in and record.check_out and record.check_out.time < record.check_in.time:
        raise ValidationError("Check-out time must be after check-in time")


def parse_manual_entry(data: Mapping[str, Any]) -> AttendanceRecord:
    """Attendance entered directly by HR rather than by checking in/out."""

    record = AttendanceRecord(
        attendance_id=0,
        employee_id=parse_int(require_field(data, "employee_id", "Employee ID"), "employee_id"),
        work_date=parse_date(require_field(data, "date", "Date"), "date"),
        check_in=parse_check_point(data.get("check_in")),
        check_out=parse_check_point(data.get("check_out")),
        breaks=parse_breaks(data.get("breaks")),
        working_hours=parse_float(data.get("working_hours") or 0, "working_hours", minimum=0, maximum=24),
        status=parse_enum(AttendanceStatus, data.get("status") or AttendanceStatus.PRESENT, "status"),
        notes=_notes(data.get("notes")),
        is_manual_entry=True,
    )
    check_legs_in_order(record)
    return record


def apply_attendance_changes(record: AttendanceRecord, data: Mapping[str, Any]) -> AttendanceRecord:
    changes: dict = {}
    if "check_in" in data:
        changes["check_in"] = parse_check_point(data["check_in"])
    if "check_out" in data:
        changes["check_out"] = parse_check_point(data["check_out"])
    if "breaks" in data:
        changes["breaks"] = parse_breaks(data["breaks"])
    if "status" in data:
        changes["status"] = parse_enum(AttendanceStatus, data["status"], "status")
    if "notes" in data:
        changes["notes"] = _notes(data["notes"])
    if "working_hours" in data:
        changes["working_hours"] = parse_float(data["working_hours"], "working_hours", minimum=0, maximum=24)
    if "is_manual_entry" in data:
        changes["is_manual_entry"] = parse_bool(data["is_manual_entry"])
    updated = replace(record, **changes)
    check_legs_in_order(updated)
    return updated
