from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_system.hr_system.common.pagination import PageRequest
from src.hr_system.hr_system.core.enums import EmployeeStatus, Role
from src.hr_system.hr_system.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.hr_system.hr_system.employees.model import EmployeeFilter
from src.hr_system.hr_system.employees.payload import parse_new_employee


def _payload(department_id: int, email: str = "carol@example.com", role: str = "employee") -> dict:
    return {
        "personal_info": {"first_name": "Carol", "last_name": "Jones", "gender": "female"},
        "job_info": {"department_id": department_id, "position": "Analyst", "join_date": "2025-01-06"},
        "salary": {"base_salary": "4200.00"},
        "benefits": {"health_insurance": True},
        "user_info": {"email": email, "password": "s3cret!", "role": role},
    }


def test_hire_creates_account_and_profile(world):
    new, account = parse_new_employee(_payload(world.sales.department_id))
    employee = world.services.employee_service.hire(world.actor(world.hr), new, account)

    assert employee.employee_code == "EMP0006"
    assert employee.salary.base_salary == Decimal("4200.00")
    assert employee.benefits.health_insurance
    assert world.users.get_by_email("carol@example.com").role == Role.EMPLOYEE


def test_manager_cannot_hire_into_another_department(world):
    new, account = parse_new_employee(_payload(world.sales.department_id))
    before = world.employees.count_all()

    with pytest.raises(AuthorizationError):
        world.services.employee_service.hire(world.actor(world.manager), new, account)
    assert world.employees.count_all() == before
    assert world.users.get_by_email("carol@example.com") is None


def test_manager_can_hire_into_own_department(world):
    new, account = parse_new_employee(_payload(world.engineering.department_id))
    employee = world.services.employee_service.hire(world.actor(world.manager), new, account)
    assert employee.job.department_id == world.engineering.department_id


def test_manager_cannot_grant_a_higher_role(world):
    new, account = parse_new_employee(_payload(world.engineering.department_id, role="hr"))
    with pytest.raises(AuthorizationError):
        world.services.employee_service.hire(world.actor(world.manager), new, account)


def test_employee_cannot_hire(world):
    new, account = parse_new_employee(_payload(world.engineering.department_id))
    with pytest.raises(AuthorizationError):
        world.services.employee_service.hire(world.actor(world.alice), new, account)


def test_duplicate_email_conflicts(world):
    new, account = parse_new_employee(_payload(world.sales.department_id, email="alice@example.com"))
    with pytest.raises(ConflictError, match="User already exists with this email"):
        world.services.employee_service.hire(world.actor(world.hr), new, account)


def test_hire_into_inactive_department_is_rejected(world):
    world.departments.deactivate(world.sales.department_id)
    new, account = parse_new_employee(_payload(world.sales.department_id))
    with pytest.raises(ValidationError):
        world.services.employee_service.hire(world.actor(world.hr), new, account)


def test_short_password_is_rejected():
    data = _payload(1)
    data["user_info"]["password"] = "123"
    with pytest.raises(ValidationError):
        parse_new_employee(data)


def test_manager_cannot_move_employee_to_another_department(world):
    with pytest.raises(AuthorizationError):
        world.services.employee_service.update(
            world.actor(world.manager),
            world.alice.employee_id,
            {"job_info": {"department_id": world.sales.department_id}},
        )
    assert world.employees.get(world.alice.employee_id).job.department_id == world.engineering.department_id


def test_update_merges_partial_sections(world):
    updated = world.services.employee_service.update(
        world.actor(world.hr),
        world.alice.employee_id,
        {"job_info": {"position": "Senior Engineer"}, "salary": {"base_salary": 3500}},
    )
    assert updated.job.position == "Senior Engineer"
    assert updated.job.join_date == date(2024, 1, 1)
    assert updated.salary.base_salary == Decimal("3500")
    assert updated.personal.first_name == "Alice"


def test_employee_cannot_manage_themselves(world):
    with pytest.raises(ValidationError):
        world.services.employee_service.update(
            world.actor(world.hr),
            world.alice.employee_id,
            {"job_info": {"manager_id": world.alice.employee_id}},
        )


def test_terminate_is_soft_and_final(world):
    svc = world.services.employee_service
    terminated = svc.terminate(world.actor(world.admin), world.bob.employee_id)

    assert terminated.status == EmployeeStatus.TERMINATED
    assert terminated.job.end_date is not None
    assert not world.users.get_by_id(world.bob.user_id).is_active
    with pytest.raises(ConflictError):
        svc.terminate(world.actor(world.admin), world.bob.employee_id)


def test_manager_cannot_terminate(world):
    with pytest.raises(AuthorizationError):
        world.services.employee_service.terminate(world.actor(world.manager), world.alice.employee_id)


def test_list_filters_and_department_listing(world):
    svc = world.services.employee_service
    page = svc.list(EmployeeFilter(search="ali"), PageRequest(page=1, limit=10))
    assert [e.employee_id for e in page.items] == [world.alice.employee_id]

    page = svc.list(EmployeeFilter(department_id=world.engineering.department_id), PageRequest(page=1, limit=2))
    assert page.total == 3
    assert page.pages == 2
    assert len(page.items) == 2

    assert {e.employee_id for e in svc.list_by_department(world.sales.department_id)} == {
        world.hr.employee_id,
        world.bob.employee_id,
    }


def test_profile_lookup_by_account(world):
    svc = world.services.employee_service
    assert svc.get_by_user(world.alice.user_id).employee_id == world.alice.employee_id
    assert svc.find_by_user(999) is None
    with pytest.raises(NotFoundError):
        svc.get_by_user(999)


@pytest.mark.parametrize("who", ["manager", "hr"])
def test_status_update_cannot_terminate(world, who):
    actor = world.actor(getattr(world, who))
    with pytest.raises(ValidationError, match="terminate action"):
        world.services.employee_service.update(actor, world.alice.employee_id, {"status": "terminated"})

    alice = world.employees.get(world.alice.employee_id)
    assert alice.status == EmployeeStatus.ACTIVE
    assert alice.job.end_date is None
    assert world.users.get_by_id(world.alice.user_id).is_active


def test_status_update_allows_leave_states(world):
    updated = world.services.employee_service.update(
        world.actor(world.manager), world.alice.employee_id, {"status": "on-leave"}
    )
    assert updated.status == EmployeeStatus.ON_LEAVE


def test_terminated_employee_cannot_be_reactivated(world):
    svc = world.services.employee_service
    svc.terminate(world.actor(world.hr), world.bob.employee_id)
    with pytest.raises(ConflictError, match="Terminated employees"):
        svc.update(world.actor(world.admin), world.bob.employee_id, {"status": "active"})
    assert world.employees.get(world.bob.employee_id).status == EmployeeStatus.TERMINATED


def test_own_profile_edits_personal_details_only(world):
    svc = world.services.employee_service
    updated = svc.update_own_profile(world.actor(world.bob), {"personal_info": {"phone": "555-0101"}})
    assert updated.personal.phone == "555-0101"
    assert updated.personal.first_name == "Bob"

    with pytest.raises(ValidationError, match="Only personal_info"):
        svc.update_own_profile(world.actor(world.bob), {"salary": {"base_salary": 9000}})
    assert world.employees.get(world.bob.employee_id).salary.base_salary == Decimal("3000")
