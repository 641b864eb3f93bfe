from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department
from .repository import DepartmentRepository

DEPARTMENT_SELECT = """
    SELECT d.department_id, d.name, d.code, d.description, d.manager_id, d.budget, d.location,
           d.parent_department_id, d.is_active, d.established_date,
           (SELECT COUNT(*) FROM employees e
            WHERE e.department_id = d.department_id AND e.status = %s) AS employee_count
    FROM departments d
"""


def row_to_department(r: dict) -> Department:
    return Department(
        department_id=int(r["department_id"]),
        name=r["name"],
        code=r["code"],
        description=r.get("description"),
        manager_id=int(r["manager_id"]) if r.get("manager_id") is not None else None,
        budget=Decimal(r.get("budget") or 0),
        location=r.get("location"),
        parent_department_id=int(r["parent_department_id"]) if r.get("parent_department_id") is not None else None,
        is_active=bool(r.get("is_active", True)),
        established_date=r.get("established_date"),
        employee_count=int(r.get("employee_count") or 0),
    )


def _values(d: Department) -> tuple:
    return (
        d.name,
        d.code,
        d.description,
        d.manager_id,
        d.budget,
        d.location,
        d.parent_department_id,
        int(d.is_active),
        d.established_date,
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{DEPARTMENT_SELECT} WHERE d.department_id=%s",
                (EmployeeStatus.ACTIVE.value, int(department_id)),
            )
            row = fetchone(cur)
            return row_to_department(row) if row else None

    def list_active(self) -> List[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{DEPARTMENT_SELECT} WHERE d.is_active=1 ORDER BY d.name", (EmployeeStatus.ACTIVE.value,))
            return [row_to_department(r) for r in fetchall(cur)]

    def list_children(self, department_id: int) -> List[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{DEPARTMENT_SELECT} WHERE d.parent_department_id=%s AND d.is_active=1 ORDER BY d.name",
                (EmployeeStatus.ACTIVE.value, int(department_id)),
            )
            return [row_to_department(r) for r in fetchall(cur)]

    def create(self, department: Department) -> Department:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO departments(
                    name, code, description, manager_id, budget, location,
                    parent_department_id, is_active, established_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _values(department),
            )
            new_id = int(cur.lastrowid)
            cur.execute(f"{DEPARTMENT_SELECT} WHERE d.department_id=%s", (EmployeeStatus.ACTIVE.value, new_id))
            return row_to_department(fetchone(cur))

    def update(self, department: Department) -> Department:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE departments
                SET name=%s, code=%s, description=%s, manager_id=%s, budget=%s, location=%s,
                    parent_department_id=%s, is_active=%s, established_date=%s
                WHERE department_id=%s
                """,
                _values(department) + (department.department_id,),
            )
            cur.execute(
                f"{DEPARTMENT_SELECT} WHERE d.department_id=%s",
                (EmployeeStatus.ACTIVE.value, department.department_id),
            )
            return row_to_department(fetchone(cur))

    def deactivate(self, department_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE departments SET is_active=0 WHERE department_id=%s", (int(department_id),))
            return cur.rowcount > 0
