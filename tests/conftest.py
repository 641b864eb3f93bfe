from __future__ import annotations

from dataclasses import dataclass

import pytest

from src.hr_system.hr_system.auth.authorizer import Actor
from src.hr_system.hr_system.container import Container, build_services
from src.hr_system.hr_system.core.enums import Role
from src.hr_system.hr_system.departments.model import Department
from src.hr_system.hr_system.employees.model import Employee
from tests.fakes import (
    InMemoryAttendance,
    InMemoryDepartments,
    InMemoryEmployees,
    InMemoryLeaves,
    InMemoryPayroll,
    InMemoryReviews,
    InMemoryUsers,
)


@dataclass
class World:
    users: InMemoryUsers
    departments: InMemoryDepartments
    employees: InMemoryEmployees
    attendance: InMemoryAttendance
    leaves: InMemoryLeaves
    payroll: InMemoryPayroll
    reviews: InMemoryReviews
    services: Container

    engineering: Department
    sales: Department
    admin: Employee
    hr: Employee
    manager: Employee
    alice: Employee
    bob: Employee

    @staticmethod
    def actor(employee: Employee) -> Actor:
        return Actor(user_id=employee.user_id, role=employee.role)


@pytest.fixture
def world() -> World:
    """Two departments; a manager and two employees in engineering, one employee in sales."""

    users = InMemoryUsers()
    departments = InMemoryDepartments()
    employees = InMemoryEmployees(users)
    attendance = InMemoryAttendance()
    leaves = InMemoryLeaves()
    payroll = InMemoryPayroll()
    reviews = InMemoryReviews()

    engineering = departments.add("Engineering", "ENG")
    sales = departments.add("Sales", "SAL")

    admin = employees.hire(first_name="Ada", department_id=engineering.department_id, role=Role.ADMIN)
    hr = employees.hire(first_name="Hana", department_id=sales.department_id, role=Role.HR)
    manager = employees.hire(first_name="Mike", department_id=engineering.department_id, role=Role.MANAGER)
    alice = employees.hire(
        first_name="Alice",
        department_id=engineering.department_id,
        manager_id=manager.employee_id,
    )
    bob = employees.hire(first_name="Bob", department_id=sales.department_id)

    services = build_services(
        users=users,
        employees=employees,
        departments=departments,
        attendance=attendance,
        leaves=leaves,
        payroll=payroll,
        reviews=reviews,
    )
    return World(
        users=users,
        departments=departments,
        employees=employees,
        attendance=attendance,
        leaves=leaves,
        payroll=payroll,
        reviews=reviews,
        services=services,
        engineering=engineering,
        sales=sales,
        admin=admin,
        hr=hr,
        manager=manager,
        alice=alice,
        bob=bob,
    )
