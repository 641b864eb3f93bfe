"""Request payload -> employee dataclasses.

Every parser accepts an optional ``base`` snapshot; keys missing from the
payload keep the base value, so the same functions serve create and partial
update.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Mapping, Optional, Tuple

from ..common.validators import (
    parse_bool,
    parse_decimal,
    parse_enum,
    parse_int,
    parse_date,
    parse_optional_date,
    require_field,
    require_length,
    require_min_length,
)
from ..core.constants import DEFAULT_CURRENCY, MIN_PASSWORD_LENGTH
from ..core.enums import EmployeeStatus, EmploymentType, Gender, PayFrequency, Role, WorkLocation
from ..core.exceptions import ValidationError
from ..users.model import NewAccount
from .model import Benefits, Employee, JobInfo, NewEmployee, PersonalInfo, Salary


def _merged(data: Optional[Mapping[str, Any]], base: Any) -> dict:
    values = asdict(base) if base is not None else {}
    values.update(dict(data or {}))
    return values


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    return parse_int(value, field_name)


def parse_personal(data: Optional[Mapping[str, Any]], base: Optional[PersonalInfo] = None) -> PersonalInfo:
    v = _merged(data, base)
    return PersonalInfo(
        first_name=require_length(v.get("first_name"), "First name", 1, 50),
        last_name=require_length(v.get("last_name"), "Last name", 1, 50),
        phone=_optional_str(v.get("phone")),
        date_of_birth=parse_optional_date(v.get("date_of_birth"), "date_of_birth"),
        gender=parse_enum(Gender, v["gender"], "gender") if v.get("gender") else None,
        address=_optional_str(v.get("address")),
    )


def parse_job(data: Optional[Mapping[str, Any]], base: Optional[JobInfo] = None) -> JobInfo:
    v = _merged(data, base)
    return JobInfo(
        department_id=parse_int(require_field(v, "department_id", "Department"), "department_id"),
        position=require_length(v.get("position"), "Position", 1, 100),
        join_date=parse_date(require_field(v, "join_date", "Join date"), "join_date"),
        employment_type=parse_enum(
            EmploymentType, v.get("employment_type") or EmploymentType.FULL_TIME, "employment_type"
        ),
        end_date=parse_optional_date(v.get("end_date"), "end_date"),
        manager_id=_optional_int(v.get("manager_id"), "manager_id"),
        work_location=parse_enum(WorkLocation, v.get("work_location") or WorkLocation.OFFICE, "work_location"),
    )


def parse_salary(data: Optional[Mapping[str, Any]], base: Optional[Salary] = None) -> Salary:
    v = _merged(data, base)
    currency = str(v.get("currency") or DEFAULT_CURRENCY).strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ValidationError("Currency must be a 3-letter code")
    return Salary(
        base_salary=parse_decimal(require_field(v, "base_salary", "Base salary"), "Base salary"),
        currency=currency,
        pay_frequency=parse_enum(PayFrequency, v.get("pay_frequency") or PayFrequency.MONTHLY, "pay_frequency"),
    )


def parse_benefits(data: Optional[Mapping[str, Any]], base: Optional[Benefits] = None) -> Benefits:
    v = _merged(data, base)
    return Benefits(
        health_insurance=parse_bool(v.get("health_insurance", False)),
        dental_insurance=parse_bool(v.get("dental_insurance", False)),
        vision_insurance=parse_bool(v.get("vision_insurance", False)),
        retirement_401k=parse_bool(v.get("retirement_401k", False)),
    )


def parse_account(data: Optional[Mapping[str, Any]]) -> NewAccount:
    data = data or {}
    email = str(data.get("email") or "").strip().lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Please provide a valid email")
    password = require_min_length(data.get("password"), "Password", MIN_PASSWORD_LENGTH)
    role = parse_enum(Role, data.get("role") or Role.EMPLOYEE, "role")
    return NewAccount(email=email, password=password, role=role)


def parse_new_employee(data: Mapping[str, Any]) -> Tuple[NewEmployee, NewAccount]:
    """Split a hire payload into the profile and the account to create."""

    new = NewEmployee(
        personal=parse_personal(data.get("personal_info")),
        job=parse_job(data.get("job_info")),
        salary=parse_salary(data.get("salary")),
        benefits=parse_benefits(data.get("benefits")),
    )
    return new, parse_account(data.get("user_info"))


def apply_employee_changes(current: Employee, data: Mapping[str, Any]) -> Employee:
    status = current.status
    if "status" in data:
        status = parse_enum(EmployeeStatus, data["status"], "status")
        if status == EmployeeStatus.TERMINATED:
            raise ValidationError("Use the terminate action to terminate an employee")
    return replace(
        current,
        personal=parse_personal(data.get("personal_info"), current.personal),
        job=parse_job(data.get("job_info"), current.job),
        salary=parse_salary(data.get("salary"), current.salary),
        benefits=parse_benefits(data.get("benefits"), current.benefits),
        status=status,
    )
