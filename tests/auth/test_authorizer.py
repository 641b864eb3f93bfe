import pytest

from src.hr_system.hr_system.auth.authorizer import (
    Action,
    can_act_on_role,
    can_perform,
    require_action,
    require_role_grant,
    require_same_department,
)
from src.hr_system.hr_system.core.enums import Role
from src.hr_system.hr_system.core.exceptions import AuthorizationError


@pytest.mark.parametrize(
    "actor, target, allowed",
    [
        (Role.ADMIN, Role.ADMIN, True),
        (Role.HR, Role.MANAGER, True),
        (Role.HR, Role.ADMIN, False),
        (Role.MANAGER, Role.EMPLOYEE, True),
        (Role.MANAGER, Role.HR, False),
        (Role.EMPLOYEE, Role.EMPLOYEE, True),
    ],
)
def test_role_hierarchy(actor, target, allowed):
    assert can_act_on_role(actor, target) is allowed


def test_action_allow_list_is_independent_of_rank():
    # A manager outranks an employee, yet may not delete employees.
    assert can_act_on_role(Role.MANAGER, Role.EMPLOYEE)
    assert not can_perform(Role.MANAGER, Action.EMPLOYEE_DELETE)
    assert can_perform(Role.MANAGER, Action.EMPLOYEE_CREATE)
    assert not can_perform(Role.HR, Action.PAYROLL_DELETE)
    assert can_perform(Role.ADMIN, Action.PAYROLL_DELETE)


def test_require_helpers_raise_authorization_error():
    with pytest.raises(AuthorizationError):
        require_action(Role.EMPLOYEE, Action.LEAVE_REVIEW)
    with pytest.raises(AuthorizationError):
        require_role_grant(Role.MANAGER, Role.ADMIN)
    require_role_grant(Role.HR, Role.HR)


def test_department_scope_applies_to_managers_only():
    require_same_department(Role.HR, 1, 2)
    require_same_department(Role.MANAGER, 1, 1)
    with pytest.raises(AuthorizationError):
        require_same_department(Role.MANAGER, 1, 2)
    with pytest.raises(AuthorizationError):
        require_same_department(Role.MANAGER, None, 1)
