from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
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


def is_duplicate_key(exc: IntegrityError) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def as_float(value: Any) -> float:
    """DECIMAL columns come back as Decimal; the domain works in float."""
    if value is None:
        return 0.0
    if isinstance(value, Decimal):
        return float(value)
    return float(value)


def as_bool(value: Any) -> bool:
    return bool(int(value)) if value is not None else False


def dump_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True)


def load_json(value: Any, default: Any = None) -> Any:
    """JSON columns may arrive as str, bytes or already-decoded values depending on the connector."""
    if default is None:
        default = {}
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return json.loads(value) if value else default


def optional_datetime(value: Any) -> Optional[datetime]:
    return value if isinstance(value, datetime) else None


def build_where(clauses: list[str]) -> str:
    return " AND ".join(clauses) if clauses else "1=1"
