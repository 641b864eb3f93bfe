from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..core.constants import EMPLOYEE_CODE_PREFIX
from ..core.enums import Role
from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor

logger = logging.getLogger(__name__)

ADMIN_DEPARTMENT_NAME = "Administration"
ADMIN_DEPARTMENT_CODE = "ADM"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = target.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    """Create the database if needed and run every statement of ``schema_path``.

    The schema only uses ``CREATE TABLE IF NOT EXISTS`` so this is safe to run
    on every start.
    """
    target = DBConfig.from_mapping(db_config)
    ensure_database_exists(db_config)

    sql = _strip_line_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = target.connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s@%s/%s", target.user, target.host, target.database)


def seed_admin(cur, *, name: str, email: str, password: str, today: date) -> bool:
    """Admin account plus its employee profile, on an open dictionary cursor.

    An existing account without a profile gets one. Returns True when
    anything was inserted.
    """
    email = email.strip().lower()
    cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
    row = cur.fetchone()
    if row:
        user_id = int(row["user_id"])
        cur.execute("SELECT employee_id FROM employees WHERE user_id=%s", (user_id,))
        if cur.fetchone():
            return False
    else:
        cur.execute(
            """
            INSERT INTO users (name, email, password_hash, role, is_active)
            VALUES (%s, %s, %s, %s, 1)
            """,
            (name, email, generate_password_hash(password), Role.ADMIN.value),
        )
        user_id = int(cur.lastrowid)

    cur.execute("SELECT department_id FROM departments WHERE code=%s", (ADMIN_DEPARTMENT_CODE,))
    department = cur.fetchone()
    if department:
        department_id = int(department["department_id"])
    else:
        cur.execute(
            "INSERT INTO departments (name, code, description) VALUES (%s, %s, %s)",
            (ADMIN_DEPARTMENT_NAME, ADMIN_DEPARTMENT_CODE, "System administration"),
        )
        department_id = int(cur.lastrowid)

    cur.execute("SELECT COUNT(*) AS total FROM employees")
    total = int(cur.fetchone()["total"])
    first_name, _, last_name = name.strip().partition(" ")
    cur.execute(
        """
        INSERT INTO employees (employee_code, user_id, first_name, last_name, department_id, position, join_date)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        """,
        (
            f"{EMPLOYEE_CODE_PREFIX}{total + 1:04d}",
            user_id,
            first_name or "System",
            last_name.strip() or "Administrator",
            department_id,
            "System Administrator",
            today,
        ),
    )
    return True


def ensure_admin_account(db_config: dict, *, name: str, email: str, password: str) -> bool:
    """Seed the first admin with an employee profile in one transaction."""

    factory = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    with db_cursor(factory) as (_, cur):
        created = seed_admin(cur, name=name, email=email, password=password, today=now_local().date())
    if created:
        logger.info("Admin account and profile seeded for %s", email.strip().lower())
    return created


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_mapping(db_config)
    conn = target.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def drop_tables(db_config: dict) -> int:
    """Drop every table in the target database; returns how many were dropped."""

    tables = list_tables(db_config)
    if not tables:
        return 0
    conn = DBConfig.from_mapping(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SET FOREIGN_KEY_CHECKS = 0")
        for table in tables:
            cur.execute(f"DROP TABLE IF EXISTS `{table}`")
        cur.execute("SET FOREIGN_KEY_CHECKS = 1")
        conn.commit()
    finally:
        conn.close()
    logger.warning("Dropped %d tables from %s", len(tables), db_config.get("database"))
    return len(tables)
