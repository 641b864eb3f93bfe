from decimal import Decimal

import pytest

from src.hr_system.hr_system.core.exceptions import AuthorizationError, ConflictError, ValidationError


def test_create_normalizes_code(world):
    department = world.services.department_service.create(
        world.actor(world.hr),
        {"name": "Finance", "code": "fin", "parent_department_id": world.sales.department_id},
    )
    assert department.code == "FIN"
    assert department.is_active
    assert world.services.department_service.subdepartments(world.sales.department_id) == [department]


@pytest.mark.parametrize("code", ["X", "TOO-LONG-CODE", "a b"])
def test_invalid_code_is_rejected(world, code):
    with pytest.raises(ValidationError):
        world.services.department_service.create(world.actor(world.hr), {"name": "Finance", "code": code})


def test_duplicate_code_conflicts(world):
    with pytest.raises(ConflictError):
        world.services.department_service.create(world.actor(world.admin), {"name": "Engineering 2", "code": "ENG"})


def test_manager_cannot_create_department(world):
    with pytest.raises(AuthorizationError):
        world.services.department_service.create(world.actor(world.manager), {"name": "Finance", "code": "FIN"})


def test_department_cannot_be_its_own_parent(world):
    with pytest.raises(ValidationError):
        world.services.department_service.update(
            world.actor(world.hr),
            world.sales.department_id,
            {"parent_department_id": world.sales.department_id},
        )


def test_delete_is_blocked_by_active_employees(world):
    svc = world.services.department_service
    with pytest.raises(ConflictError, match="active employees"):
        svc.delete(world.actor(world.admin), world.sales.department_id)

    empty = svc.create(world.actor(world.admin), {"name": "Legal", "code": "LEG"})
    svc.delete(world.actor(world.admin), empty.department_id)
    assert not world.departments.get(empty.department_id).is_active
    assert empty.department_id not in [d.department_id for d in svc.list()]


def test_only_admin_deletes(world):
    with pytest.raises(AuthorizationError):
        world.services.department_service.delete(world.actor(world.hr), world.sales.department_id)


def test_stats_cover_active_employees(world):
    stats = world.services.department_service.stats(world.engineering.department_id)
    assert stats.total_employees == 3
    assert stats.total_salary_budget == Decimal("9000.00")
    assert stats.average_salary == Decimal("3000.00")
    assert stats.employment_types == {"full-time": 3}
