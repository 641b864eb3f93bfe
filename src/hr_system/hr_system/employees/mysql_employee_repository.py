from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from ..common.pagination import PageRequest
from ..core.enums import EmployeeStatus, EmploymentType, Gender, PayFrequency, Role, WorkLocation
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_total, fetchall, fetchone, where_clause
from .model import Benefits, Employee, EmployeeFilter, JobInfo, NewEmployee, PersonalInfo, Salary
from .repository import EmployeeRepository

EMPLOYEE_SELECT = """
    SELECT e.employee_id, e.employee_code, e.user_id,
           e.first_name, e.last_name, e.phone, e.date_of_birth, e.gender, e.address,
           e.department_id, e.position, e.employment_type, e.join_date, e.end_date,
           e.manager_id, e.work_location,
           e.base_salary, e.currency, e.pay_frequency,
           e.health_insurance, e.dental_insurance, e.vision_insurance, e.retirement_401k,
           e.status, u.email, u.role
    FROM employees e
    JOIN users u ON u.user_id = e.user_id
"""


def row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        user_id=int(r["user_id"]),
        personal=PersonalInfo(
            first_name=r["first_name"],
            last_name=r["last_name"],
            phone=r.get("phone"),
            date_of_birth=r.get("date_of_birth"),
            gender=Gender(r["gender"]) if r.get("gender") else None,
            address=r.get("address"),
        ),
        job=JobInfo(
            department_id=int(r["department_id"]),
            position=r["position"],
            join_date=r["join_date"],
            employment_type=EmploymentType(r["employment_type"]),
            end_date=r.get("end_date"),
            manager_id=int(r["manager_id"]) if r.get("manager_id") is not None else None,
            work_location=WorkLocation(r["work_location"]),
        ),
        salary=Salary(
            base_salary=Decimal(r["base_salary"]),
            currency=r["currency"],
            pay_frequency=PayFrequency(r["pay_frequency"]),
        ),
        benefits=Benefits(
            health_insurance=bool(r["health_insurance"]),
            dental_insurance=bool(r["dental_insurance"]),
            vision_insurance=bool(r["vision_insurance"]),
            retirement_401k=bool(r["retirement_401k"]),
        ),
        status=EmployeeStatus(r["status"]),
        email=r.get("email"),
        role=Role(r["role"]) if r.get("role") else None,
    )


def _profile_values(personal: PersonalInfo, job: JobInfo, salary: Salary, benefits: Benefits) -> tuple:
    return (
        personal.first_name,
        personal.last_name,
        personal.phone,
        personal.date_of_birth,
        personal.gender.value if personal.gender else None,
        personal.address,
        job.department_id,
        job.position,
        job.employment_type.value,
        job.join_date,
        job.end_date,
        job.manager_id,
        job.work_location.value,
        salary.base_salary,
        salary.currency,
        salary.pay_frequency.value,
        int(benefits.health_insurance),
        int(benefits.dental_insurance),
        int(benefits.vision_insurance),
        int(benefits.retirement_401k),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{EMPLOYEE_SELECT} WHERE e.employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return row_to_employee(row) if row else None

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{EMPLOYEE_SELECT} WHERE e.user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return row_to_employee(row) if row else None

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM employees")
            return fetch_total(cur)

    def create_with_account(
        self,
        *,
        employee_code: str,
        new: NewEmployee,
        email: str,
        password_hash: str,
        role: Role,
    ) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, role, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (new.personal.full_name, email.lower(), password_hash, Role(role).value),
            )
            user_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO employees(
                    employee_code, user_id,
                    first_name, last_name, phone, date_of_birth, gender, address,
                    department_id, position, employment_type, join_date, end_date,
                    manager_id, work_location,
                    base_salary, currency, pay_frequency,
                    health_insurance, dental_insurance, vision_insurance, retirement_401k,
                    status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (employee_code, user_id)
                + _profile_values(new.personal, new.job, new.salary, new.benefits)
                + (EmployeeStatus.ACTIVE.value,),
            )
            employee_id = int(cur.lastrowid)
            cur.execute(f"{EMPLOYEE_SELECT} WHERE e.employee_id=%s", (employee_id,))
            return row_to_employee(fetchone(cur))

    def update(self, employee: Employee) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET first_name=%s, last_name=%s, phone=%s, date_of_birth=%s, gender=%s, address=%s,
                    department_id=%s, position=%s, employment_type=%s, join_date=%s, end_date=%s,
                    manager_id=%s, work_location=%s,
                    base_salary=%s, currency=%s, pay_frequency=%s,
                    health_insurance=%s, dental_insurance=%s, vision_insurance=%s, retirement_401k=%s,
                    status=%s
                WHERE employee_id=%s
                """,
                _profile_values(employee.personal, employee.job, employee.salary, employee.benefits)
                + (employee.status.value, employee.employee_id),
            )
            cur.execute("UPDATE users SET name=%s WHERE user_id=%s", (employee.full_name, employee.user_id))
            cur.execute(f"{EMPLOYEE_SELECT} WHERE e.employee_id=%s", (employee.employee_id,))
            row = fetchone(cur)
            if not row:
                raise NotFoundError("Employee not found")
            return row_to_employee(row)

    def terminate(self, employee_id: int, end_date: date) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET status=%s, end_date=%s WHERE employee_id=%s",
                (EmployeeStatus.TERMINATED.value, end_date, int(employee_id)),
            )
            if cur.rowcount == 0:
                raise NotFoundError("Employee not found")
            cur.execute(
                """
                UPDATE users u JOIN employees e ON e.user_id = u.user_id
                SET u.is_active=0
                WHERE e.employee_id=%s
                """,
                (int(employee_id),),
            )
            cur.execute(f"{EMPLOYEE_SELECT} WHERE e.employee_id=%s", (int(employee_id),))
            return row_to_employee(fetchone(cur))

    def list(self, filters: EmployeeFilter, page: PageRequest) -> Tuple[List[Employee], int]:
        clauses: list[str] = []
        params: list = []
        if filters.department_id is not None:
            clauses.append("e.department_id=%s")
            params.append(int(filters.department_id))
        if filters.status is not None:
            clauses.append("e.status=%s")
            params.append(filters.status.value)
        if filters.search:
            clauses.append("(e.first_name LIKE %s OR e.last_name LIKE %s OR e.employee_code LIKE %s)")
            like = f"%{filters.search}%"
            params.extend([like, like, like])
        where = where_clause(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM employees e {where}", tuple(params))
            total = fetch_total(cur)
            cur.execute(
                f"{EMPLOYEE_SELECT} {where} ORDER BY e.created_at DESC, e.employee_id DESC LIMIT %s OFFSET %s",
                tuple(params) + (page.limit, page.offset),
            )
            return [row_to_employee(r) for r in fetchall(cur)], total

    def list_active_in_department(self, department_id: int) -> List[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{EMPLOYEE_SELECT} WHERE e.department_id=%s AND e.status=%s ORDER BY e.last_name, e.first_name",
                (int(department_id), EmployeeStatus.ACTIVE.value),
            )
            return [row_to_employee(r) for r in fetchall(cur)]

    def count_active_in_department(self, department_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM employees WHERE department_id=%s AND status=%s",
                (int(department_id), EmployeeStatus.ACTIVE.value),
            )
            return fetch_total(cur)
