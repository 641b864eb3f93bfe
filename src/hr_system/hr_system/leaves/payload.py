from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional

from ..common.validators import parse_bool, parse_date, parse_enum, require_field, require_length
from ..core.constants import LEAVE_REASON_MAX_LENGTH, LEAVE_REASON_MIN_LENGTH
from ..core.enums import HalfDayPeriod, LeaveType
from ..core.exceptions import ValidationError
from .model import EmergencyContact, LeaveRequest


def parse_emergency_contact(value: Any) -> Optional[EmergencyContact]:
    if not value:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError("Emergency contact must be an object")
    return EmergencyContact(
        name=value.get("name") or None,
        phone=value.get("phone") or None,
        relationship=value.get("relationship") or None,
    )


def _reason(value: Any) -> str:
    return require_length(value, "Reason", LEAVE_REASON_MIN_LENGTH, LEAVE_REASON_MAX_LENGTH)


def _half_day(request: LeaveRequest) -> LeaveRequest:
    if not request.is_half_day:
        return replace(request, half_day_period=None)
    if request.half_day_period is None:
        raise ValidationError("Half day period is required for half-day leave")
    return request


def parse_leave_request(data: Mapping[str, Any]) -> LeaveRequest:
    """Parse an application; ids, status and totals are filled in on submit."""

    request = LeaveRequest(
        leave_id=0,
        employee_id=0,
        leave_type=parse_enum(LeaveType, require_field(data, "leave_type", "Leave type"), "leave_type"),
        start_date=parse_date(require_field(data, "start_date", "Start date"), "start_date"),
        end_date=parse_date(require_field(data, "end_date", "End date"), "end_date"),
        reason=_reason(data.get("reason")),
        is_half_day=parse_bool(data.get("is_half_day", False)),
        half_day_period=(
            parse_enum(HalfDayPeriod, data["half_day_period"], "half_day_period")
            if data.get("half_day_period")
            else None
        ),
        emergency_contact=parse_emergency_contact(data.get("emergency_contact")),
    )
    return _half_day(request)


def apply_leave_changes(current: LeaveRequest, data: Mapping[str, Any]) -> LeaveRequest:
    changes: dict = {}
    if "leave_type" in data:
        changes["leave_type"] = parse_enum(LeaveType, data["leave_type"], "leave_type")
    if "start_date" in data:
        changes["start_date"] = parse_date(data["start_date"], "start_date")
    if "end_date" in data:
        changes["end_date"] = parse_date(data["end_date"], "end_date")
    if "reason" in data:
        changes["reason"] = _reason(data["reason"])
    if "is_half_day" in data:
        changes["is_half_day"] = parse_bool(data["is_half_day"])
    if "half_day_period" in data:
        changes["half_day_period"] = (
            parse_enum(HalfDayPeriod, data["half_day_period"], "half_day_period") if data["half_day_period"] else None
        )
    if "emergency_contact" in data:
        changes["emergency_contact"] = parse_emergency_contact(data["emergency_contact"])
    return _half_day(replace(current, **changes))
