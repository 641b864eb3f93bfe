from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import asdict, dataclass, replace
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..auth.authorizer import Action, Actor, require_action
from ..common.money import money_sum, to_money
from ..common.validators import parse_bool, parse_decimal, parse_int, parse_optional_date, require_length
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import Department
from .repository import DepartmentRepository

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^[A-Z0-9]{2,10}$")


@dataclass(frozen=True)
class DepartmentStats:
    total_employees: int
    average_salary: Decimal
    total_salary_budget: Decimal
    employment_types: Dict[str, int]


def parse_department(data: Mapping[str, Any], base: Optional[Department] = None) -> Department:
    v = asdict(base) if base is not None else {"department_id": 0}
    v.update(data)

    code = str(v.get("code") or "").strip().upper()
    if not _CODE_RE.match(code):
        raise ValidationError("Department code must be 2-10 letters or digits")

    def _optional_id(key: str) -> Optional[int]:
        return parse_int(v[key], key) if v.get(key) not in (None, "") else None

    description = (v.get("description") or "").strip() or None
    if description and len(description) > 500:
        raise ValidationError("Description cannot exceed 500 characters")

    return Department(
        department_id=int(v.get("department_id") or 0),
        name=require_length(v.get("name"), "Department name", 2, 50),
        code=code,
        description=description,
        manager_id=_optional_id("manager_id"),
        budget=parse_decimal(v.get("budget"), "Budget"),
        location=(v.get("location") or "").strip() or None,
        parent_department_id=_optional_id("parent_department_id"),
        is_active=parse_bool(v.get("is_active", True)),
        established_date=parse_optional_date(v.get("established_date"), "established_date"),
        employee_count=int(v.get("employee_count") or 0),
    )


class DepartmentService:
    def __init__(self, departments: DepartmentRepository, employees: EmployeeRepository):
        self._departments = departments
        self._employees = employees

    def get(self, department_id: int) -> Department:
        department = self._departments.get(department_id)
        if not department:
            raise NotFoundError("Department not found")
        return department

    def subdepartments(self, department_id: int) -> List[Department]:
        return self._departments.list_children(department_id)

    def list(self) -> List[Department]:
        return self._departments.list_active()

    def create(self, actor: Actor, data: Mapping[str, Any]) -> Department:
        require_action(actor.role, Action.DEPARTMENT_MANAGE)
        department = parse_department(data)
        self._check_references(department)
        created = self._departments.create(department)
        logger.info("Department %s created by user %s", created.code, actor.user_id)
        return created

    def update(self, actor: Actor, department_id: int, data: Mapping[str, Any]) -> Department:
        require_action(actor.role, Action.DEPARTMENT_MANAGE)
        current = self.get(department_id)
        department = replace(parse_department(data, current), department_id=current.department_id)
        if department.parent_department_id == department.department_id:
            raise ValidationError("A department cannot be its own parent")
        self._check_references(department)
        return self._departments.update(department)

    def delete(self, actor: Actor, department_id: int) -> None:
        """Soft delete; refused while active employees still belong to it."""

        require_action(actor.role, Action.DEPARTMENT_DELETE)
        department = self.get(department_id)
        if self._employees.count_active_in_department(department_id) > 0:
            raise ConflictError("Cannot delete department with active employees")
        self._departments.deactivate(department_id)
        logger.info("Department %s deactivated by user %s", department.code, actor.user_id)

    def stats(self, department_id: int) -> DepartmentStats:
        self.get(department_id)
        employees = self._employees.list_active_in_department(department_id)
        total = len(employees)
        budget = money_sum(e.salary.base_salary for e in employees)
        return DepartmentStats(
            total_employees=total,
            average_salary=to_money(budget / total) if total else to_money(0),
            total_salary_budget=budget,
            employment_types=dict(Counter(e.job.employment_type.value for e in employees)),
        )

    def _check_references(self, department: Department) -> None:
        if department.parent_department_id is not None and not self._departments.get(department.parent_department_id):
            raise ValidationError("Parent department not found")
        if department.manager_id is not None and not self._employees.get(department.manager_id):
            raise ValidationError("Manager not found")
