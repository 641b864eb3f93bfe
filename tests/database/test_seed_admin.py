from __future__ import annotations

from datetime import date

from werkzeug.security import check_password_hash

from src.hr_system.hr_system.database.bootstrap import ADMIN_DEPARTMENT_CODE, seed_admin


class ScriptedCursor:
    """Answers each fetchone() from a queue; INSERTs get increasing ids."""

    def __init__(self, *rows):
        self.rows = list(rows)
        self.inserts = []
        self.lastrowid = 100

    def execute(self, sql, params=None):
        sql = " ".join(sql.split())
        if sql.startswith("INSERT"):
            self.lastrowid += 1
            self.inserts.append((sql.split()[2], params))

    def fetchone(self):
        return self.rows.pop(0)

    def tables(self):
        return [table for table, _ in self.inserts]


def test_fresh_database_gets_account_profile_and_department():
    # no user, no department, 0 employees
    cur = ScriptedCursor(None, None, {"total": 0})
    created = seed_admin(cur, name="Site Admin", email=" Admin@Example.com ", password="admin123", today=date(2025, 1, 2))

    assert created
    assert cur.tables() == ["users", "departments", "employees"]
    _, user = cur.inserts[0]
    assert user[1] == "admin@example.com"
    assert user[3] == "admin"
    assert check_password_hash(user[2], "admin123")
    _, department = cur.inserts[1]
    assert department[1] == ADMIN_DEPARTMENT_CODE
    _, employee = cur.inserts[2]
    assert employee == ("EMP0001", 101, "Site", "Admin", 102, "System Administrator", date(2025, 1, 2))


def test_existing_account_without_profile_is_repaired():
    cur = ScriptedCursor({"user_id": 7}, None, {"department_id": 3}, {"total": 4})
    assert seed_admin(cur, name="Root", email="admin@example.com", password="x", today=date(2025, 1, 2))

    assert cur.tables() == ["employees"]
    _, employee = cur.inserts[0]
    assert employee[:5] == ("EMP0005", 7, "Root", "Administrator", 3)


def test_complete_admin_is_left_alone():
    cur = ScriptedCursor({"user_id": 7}, {"employee_id": 1})
    assert not seed_admin(cur, name="Root", email="admin@example.com", password="x", today=date(2025, 1, 2))
    assert cur.inserts == []
