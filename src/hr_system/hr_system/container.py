from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.policy import AttendancePolicy, LeavePolicy, PayrollPolicy
from .database.connection import DBConfig, DatabaseConnection
from .departments.mysql_department_repository import MySQLDepartmentRepository
from .departments.service import DepartmentService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .performance.mysql_review_repository import MySQLReviewRepository
from .performance.service import PerformanceService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    employee_service: EmployeeService
    department_service: DepartmentService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService
    performance_service: PerformanceService


def build_services(
    *,
    users,
    employees,
    departments,
    attendance,
    leaves,
    payroll,
    reviews,
    payroll_policy: Optional[PayrollPolicy] = None,
    leave_policy: Optional[LeavePolicy] = None,
    attendance_policy: Optional[AttendancePolicy] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in the app, fakes in tests)."""

    attendance_service = AttendanceService(attendance, employees, policy=attendance_policy)
    return Container(
        auth_service=AuthService(users),
        employee_service=EmployeeService(employees, departments, users),
        department_service=DepartmentService(departments, employees),
        attendance_service=attendance_service,
        leave_service=LeaveService(leaves, employees, policy=leave_policy),
        payroll_service=PayrollService(payroll, employees, attendance_service, policy=payroll_policy),
        performance_service=PerformanceService(reviews, employees),
    )


def build_container(
    *,
    db_config: dict,
    payroll_policy: Optional[PayrollPolicy] = None,
    leave_policy: Optional[LeavePolicy] = None,
    attendance_policy: Optional[AttendancePolicy] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return build_services(
        users=MySQLUserRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        payroll=MySQLPayrollRepository(conn),
        reviews=MySQLReviewRepository(conn),
        payroll_policy=payroll_policy,
        leave_policy=leave_policy,
        attendance_policy=attendance_policy,
    )
