from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_CURRENCY
from ..core.enums import EmployeeStatus, EmploymentType, Gender, PayFrequency, Role, WorkLocation


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str
    last_name: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class JobInfo:
    department_id: int
    position: str
    join_date: date
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    end_date: Optional[date] = None
    manager_id: Optional[int] = None
    work_location: WorkLocation = WorkLocation.OFFICE


@dataclass(frozen=True)
class Salary:
    base_salary: Decimal
    currency: str = DEFAULT_CURRENCY
    pay_frequency: PayFrequency = PayFrequency.MONTHLY


@dataclass(frozen=True)
class Benefits:
    health_insurance: bool = False
    dental_insurance: bool = False
    vision_insurance: bool = False
    retirement_401k: bool = False


@dataclass(frozen=True)
class NewEmployee:
    """Profile data for a hire; the account is created alongside it."""

    personal: PersonalInfo
    job: JobInfo
    salary: Salary
    benefits: Benefits = field(default_factory=Benefits)


@dataclass(frozen=True)
class Employee:
    """Employee profile, linked to exactly one user account.

    Note: plain data object (no DB access code).
    """

    employee_id: int
    employee_code: str
    user_id: int
    personal: PersonalInfo
    job: JobInfo
    salary: Salary
    benefits: Benefits = field(default_factory=Benefits)
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    email: Optional[str] = None
    role: Optional[Role] = None

    @property
    def full_name(self) -> str:
        return self.personal.full_name

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class EmployeeFilter:
    department_id: Optional[int] = None
    status: Optional[EmployeeStatus] = None
    search: Optional[str] = None
