from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, ValidationError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction.

    Everything executed inside the block is committed together; any exception
    rolls the whole block back. Integrity errors from MySQL are translated into
    domain errors so callers never see driver messages.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            logger.warning("Unique key violation: %s", e.msg)
            raise ConflictError("Duplicate entry found") from e
        logger.warning("Integrity violation: %s", e.msg)
        raise ValidationError("Referenced record is missing or still in use") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def fetch_total(cur) -> int:
    row = cur.fetchone()
    if not row:
        return 0
    return int(row["total"] if isinstance(row, dict) else row[0])


def where_clause(clauses: List[str]) -> str:
    return f"WHERE {' AND '.join(clauses)}" if clauses else ""


def to_json(value: Any) -> str:
    def _default(o):
        if isinstance(o, Decimal):
            return str(o)
        if hasattr(o, "isoformat"):
            return o.isoformat()
        raise TypeError(f"Unsupported JSON value: {type(o)!r}")

    return json.dumps(value, default=_default)


def from_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON column (the connector may return str or bytes)."""

    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value
