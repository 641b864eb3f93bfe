"""Role-based authorization.

Two separate predicates:

* ``can_act_on_role`` compares ranks in the role hierarchy. It governs which
  account role an actor may *grant* (e.g. when hiring).
* ``can_perform`` checks a fixed allow-list per action. It governs which
  operations an actor may *perform*.

The two are evaluated independently; hiring requires both.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError

ROLE_HIERARCHY: Mapping[Role, int] = MappingProxyType(
    {
        Role.EMPLOYEE: 1,
        Role.MANAGER: 2,
        Role.HR: 3,
        Role.ADMIN: 4,
    }
)


class Action(str, Enum):
    EMPLOYEE_CREATE = "employee:create"
    EMPLOYEE_UPDATE = "employee:update"
    EMPLOYEE_DELETE = "employee:delete"

    DEPARTMENT_MANAGE = "department:manage"
    DEPARTMENT_DELETE = "department:delete"

    ATTENDANCE_VIEW_ALL = "attendance:view-all"
    ATTENDANCE_MANAGE = "attendance:manage"

    LEAVE_VIEW_ALL = "leave:view-all"
    LEAVE_REVIEW = "leave:review"
    LEAVE_EDIT_OTHERS = "leave:edit-others"
    LEAVE_DELETE_OTHERS = "leave:delete-others"
    LEAVE_STATS = "leave:stats"

    PAYROLL_MANAGE = "payroll:manage"
    PAYROLL_DELETE = "payroll:delete"
    PAYSLIP_VIEW_OTHERS = "payroll:payslip-others"

    REVIEW_MANAGE = "review:manage"
    REVIEW_EDIT_OTHERS = "review:edit-others"
    REVIEW_DELETE = "review:delete"
    REVIEW_STATS = "review:stats"


_ADMIN_HR: FrozenSet[Role] = frozenset({Role.ADMIN, Role.HR})
_ADMIN_HR_MANAGER: FrozenSet[Role] = frozenset({Role.ADMIN, Role.HR, Role.MANAGER})

ACTION_PERMISSIONS: Mapping[Action, FrozenSet[Role]] = MappingProxyType(
    {
        Action.EMPLOYEE_CREATE: _ADMIN_HR_MANAGER,
        Action.EMPLOYEE_UPDATE: _ADMIN_HR_MANAGER,
        Action.EMPLOYEE_DELETE: _ADMIN_HR,
        Action.DEPARTMENT_MANAGE: _ADMIN_HR,
        Action.DEPARTMENT_DELETE: frozenset({Role.ADMIN}),
        Action.ATTENDANCE_VIEW_ALL: _ADMIN_HR_MANAGER,
        Action.ATTENDANCE_MANAGE: _ADMIN_HR,
        Action.LEAVE_VIEW_ALL: _ADMIN_HR_MANAGER,
        Action.LEAVE_REVIEW: _ADMIN_HR_MANAGER,
        Action.LEAVE_EDIT_OTHERS: _ADMIN_HR_MANAGER,
        Action.LEAVE_DELETE_OTHERS: _ADMIN_HR,
        Action.LEAVE_STATS: _ADMIN_HR,
        Action.PAYROLL_MANAGE: _ADMIN_HR,
        Action.PAYROLL_DELETE: frozenset({Role.ADMIN}),
        Action.PAYSLIP_VIEW_OTHERS: _ADMIN_HR,
        Action.REVIEW_MANAGE: _ADMIN_HR_MANAGER,
        Action.REVIEW_EDIT_OTHERS: _ADMIN_HR,
        Action.REVIEW_DELETE: _ADMIN_HR,
        Action.REVIEW_STATS: _ADMIN_HR,
    }
)


@dataclass(frozen=True)
class Actor:
    """Trusted identity supplied by the session layer to every domain call."""

    user_id: int
    role: Role


def rank_of(role: Role) -> int:
    return ROLE_HIERARCHY[Role(role)]


def can_act_on_role(actor_role: Role, target_role: Role) -> bool:
    """True when ``target_role`` ranks at or below ``actor_role``."""

    return rank_of(target_role) <= rank_of(actor_role)


def can_perform(actor_role: Role, action: Action) -> bool:
    return Role(actor_role) in ACTION_PERMISSIONS[action]


def require_action(actor_role: Role, action: Action, message: Optional[str] = None) -> None:
    if not can_perform(actor_role, action):
        raise AuthorizationError(message or "Not authorized to perform this action")


def require_role_grant(actor_role: Role, target_role: Role) -> None:
    if not can_act_on_role(actor_role, target_role):
        raise AuthorizationError(f"Not authorized to assign the '{Role(target_role).value}' role")


def require_same_department(
    actor_role: Role,
    actor_department_id: Optional[int],
    target_department_id: Optional[int],
) -> None:
    """Managers may only act on employees of their own department."""

    if Role(actor_role) != Role.MANAGER:
        return
    if actor_department_id is None or actor_department_id != target_department_id:
        raise AuthorizationError("Managers can only manage employees in their own department")
