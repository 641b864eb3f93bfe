"""db_cursor transaction handling against a stubbed MySQL connection."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.hr_system.hr_system.core.enums import Role
from src.hr_system.hr_system.core.exceptions import ConflictError, ValidationError
from src.hr_system.hr_system.database.mysql_base import db_cursor
from src.hr_system.hr_system.employees.model import JobInfo, NewEmployee, PersonalInfo, Salary
from src.hr_system.hr_system.employees.mysql_employee_repository import MySQLEmployeeRepository


class StubCursor:
    def __init__(self, fail_on: str = "", error: Exception = None):
        self.fail_on = fail_on
        self.error = error
        self.statements = []
        self.lastrowid = 0
        self.closed = False

    def execute(self, sql, params=None):
        if self.fail_on and self.fail_on in sql:
            raise self.error
        self.statements.append(" ".join(sql.split()))
        self.lastrowid += 1

    def fetchone(self):
        return None

    def close(self):
        self.closed = True


class StubConnection:
    def __init__(self, cursor: StubCursor):
        self._cursor = cursor
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class StubFactory:
    def __init__(self, conn: StubConnection):
        self.conn = conn

    def connect(self):
        return self.conn


def _stub(fail_on: str = "", error: Exception = None):
    cursor = StubCursor(fail_on, error)
    return StubFactory(StubConnection(cursor)), cursor


def _hire(repo: MySQLEmployeeRepository):
    return repo.create_with_account(
        employee_code="EMP0001",
        new=NewEmployee(
            personal=PersonalInfo(first_name="Carol", last_name="Jones"),
            job=JobInfo(department_id=1, position="Analyst", join_date=date(2025, 1, 6)),
            salary=Salary(base_salary=Decimal("4200")),
        ),
        email="carol@example.com",
        password_hash="hash",
        role=Role.EMPLOYEE,
    )


def test_block_commits_once():
    factory, cursor = _stub()
    with db_cursor(factory) as (_, cur):
        cur.execute("INSERT INTO users(name) VALUES(%s)", ("a",))
        cur.execute("INSERT INTO employees(user_id) VALUES(%s)", (1,))

    assert factory.conn.commits == 1
    assert factory.conn.rollbacks == 0
    assert cursor.closed and factory.conn.closed


def test_profile_failure_rolls_back_the_account():
    error = mysql.connector.IntegrityError(msg="Duplicate entry 'EMP0001'", errno=errorcode.ER_DUP_ENTRY)
    factory, cursor = _stub(fail_on="INSERT INTO employees", error=error)

    with pytest.raises(ConflictError, match="Duplicate entry found"):
        _hire(MySQLEmployeeRepository(factory))

    assert cursor.statements[0].startswith("INSERT INTO users")
    assert factory.conn.rollbacks == 1
    assert factory.conn.commits == 0
    assert factory.conn.closed


def test_unexpected_error_rolls_back_and_propagates():
    error = mysql.connector.OperationalError(msg="Lost connection", errno=errorcode.CR_SERVER_LOST)
    factory, _ = _stub(fail_on="INSERT INTO employees", error=error)

    with pytest.raises(mysql.connector.OperationalError):
        _hire(MySQLEmployeeRepository(factory))
    assert factory.conn.rollbacks == 1
    assert factory.conn.commits == 0


def test_duplicate_key_becomes_conflict():
    error = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    factory, _ = _stub(fail_on="INSERT", error=error)

    with pytest.raises(ConflictError) as exc:
        with db_cursor(factory) as (_, cur):
            cur.execute("INSERT INTO users(email) VALUES(%s)", ("a@example.com",))
    assert "a@example.com" not in str(exc.value)
    assert factory.conn.rollbacks == 1


def test_missing_reference_becomes_validation_error():
    error = mysql.connector.IntegrityError(msg="FK fails", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    factory, _ = _stub(fail_on="INSERT", error=error)

    with pytest.raises(ValidationError):
        with db_cursor(factory) as (_, cur):
            cur.execute("INSERT INTO employees(department_id) VALUES(%s)", (99,))
    assert factory.conn.rollbacks == 1
    assert factory.conn.commits == 0
