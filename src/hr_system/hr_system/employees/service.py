from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional

from werkzeug.security import generate_password_hash

from ..auth.authorizer import Action, Actor, require_action, require_role_grant, require_same_department
from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..core.constants import EMPLOYEE_CODE_PREFIX
from ..core.enums import EmployeeStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..departments.repository import DepartmentRepository
from ..users.model import NewAccount
from ..users.repository import UserRepository
from .model import Employee, EmployeeFilter, NewEmployee
from .payload import apply_employee_changes, parse_personal
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Hire, update and terminate employees.

    Hiring checks two things separately: the action allow-list and whether
    the actor's rank may grant the requested account role. Managers are
    further limited to their own department.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        users: UserRepository,
    ):
        self._employees = employees
        self._departments = departments
        self._users = users

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_by_user(self, user_id: int) -> Employee:
        employee = self._employees.get_by_user_id(user_id)
        if not employee:
            raise NotFoundError("Employee profile not found")
        return employee

    def find_by_user(self, user_id: int) -> Optional[Employee]:
        return self._employees.get_by_user_id(user_id)

    def list(self, filters: EmployeeFilter, page: PageRequest) -> Page[Employee]:
        items, total = self._employees.list(filters, page)
        return Page(items=items, total=total, request=page)

    def list_by_department(self, department_id: int) -> List[Employee]:
        return self._employees.list_active_in_department(department_id)

    def hire(self, actor: Actor, new: NewEmployee, account: NewAccount) -> Employee:
        require_action(actor.role, Action.EMPLOYEE_CREATE)
        require_role_grant(actor.role, account.role)
        self._require_manager_scope(actor, new.job.department_id)
        self._require_active_department(new.job.department_id)
        self._require_known_manager(new.job.manager_id)

        if self._users.get_by_email(account.email):
            raise ConflictError("User already exists with this email")

        employee_code = f"{EMPLOYEE_CODE_PREFIX}{self._employees.count_all() + 1:04d}"
        employee = self._employees.create_with_account(
            employee_code=employee_code,
            new=new,
            email=account.email,
            password_hash=generate_password_hash(account.password),
            role=account.role,
        )
        logger.info(
            "Hired employee %s (id=%s) into department %s by user %s",
            employee.employee_code,
            employee.employee_id,
            employee.job.department_id,
            actor.user_id,
        )
        return employee

    def update(self, actor: Actor, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        require_action(actor.role, Action.EMPLOYEE_UPDATE)
        current = self.get(employee_id)
        if current.status == EmployeeStatus.TERMINATED:
            raise ConflictError("Terminated employees cannot be updated")
        self._require_manager_scope(actor, current.job.department_id)

        updated = apply_employee_changes(current, changes)
        if updated.job.department_id != current.job.department_id:
            self._require_manager_scope(actor, updated.job.department_id)
            self._require_active_department(updated.job.department_id)
        if updated.job.manager_id != current.job.manager_id:
            self._require_known_manager(updated.job.manager_id)
        if updated.job.manager_id == current.employee_id:
            raise ValidationError("An employee cannot be their own manager")

        return self._employees.update(updated)

    def update_own_profile(self, actor: Actor, changes: Mapping[str, Any]) -> Employee:
        """Self-service edit of the actor's own personal details.

        Job, salary, benefits and status stay with ``update``.
        """

        current = self.get_by_user(actor.user_id)
        extra = set(changes) - {"personal_info"}
        if extra:
            raise ValidationError(f"Only personal_info can be changed here, got: {', '.join(sorted(extra))}")

        updated = replace(current, personal=parse_personal(changes.get("personal_info"), current.personal))
        logger.info("Employee %s updated their profile", current.employee_code)
        return self._employees.update(updated)

    def terminate(self, actor: Actor, employee_id: int) -> Employee:
        """Soft delete: the profile stays, the account is deactivated."""

        require_action(actor.role, Action.EMPLOYEE_DELETE)
        current = self.get(employee_id)
        if current.status == EmployeeStatus.TERMINATED:
            raise ConflictError("Employee is already terminated")

        employee = self._employees.terminate(employee_id, now_local().date())
        logger.info("Terminated employee %s by user %s", employee.employee_code, actor.user_id)
        return employee

    def _require_manager_scope(self, actor: Actor, target_department_id: int) -> None:
        own = self._employees.get_by_user_id(actor.user_id)
        require_same_department(actor.role, own.job.department_id if own else None, target_department_id)

    def _require_active_department(self, department_id: int) -> None:
        department = self._departments.get(department_id)
        if not department or not department.is_active:
            raise ValidationError("Department not found or inactive")

    def _require_known_manager(self, manager_id: Optional[int]) -> None:
        if manager_id is not None and not self._employees.get(manager_id):
            raise ValidationError("Manager not found")
