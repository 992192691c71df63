from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

DEMO_EMPLOYEES = (
    ("EMP001", "Aarav Sharma", "aarav.sharma@hrms.local", "Engineering", "Software Engineer"),
    ("EMP002", "Priya Nair", "priya.nair@hrms.local", "Human Resources", "HR Manager"),
    ("EMP003", "Rohan Mehta", "rohan.mehta@hrms.local", "Finance", "Accountant"),
)


def _connect(db_config: dict, *, with_database: bool = True):
    return DatabaseConnection.get_instance(DBConfig.from_dict(db_config)).connect(with_database=with_database)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside quoted literals.
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
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
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
    database = DBConfig.from_dict(db_config).database
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(db_config: dict, *, sql_path: str | Path) -> int:
    """Execute every statement of a .sql file against the configured database.

    Returns the number of statements executed.
    """
    sql = _strip_create_db_and_use(Path(sql_path).read_text(encoding="utf-8"))
    conn = _connect(db_config)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    count = apply_sql_file(db_config, sql_path=schema_path)
    logger.info("Schema applied from %s (%d statements)", schema_path, count)


def ensure_demo_employees(db_config: dict) -> int:
    """Insert or refresh the demo employees; returns how many rows were written."""
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for employee_id, full_name, email, department, designation in DEMO_EMPLOYEES:
            cur.execute(
                """
                INSERT INTO employees(employee_id, full_name, email, department, designation, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), department=VALUES(department),
                    designation=VALUES(designation), is_active=1
                """,
                (employee_id, full_name, email, department, designation),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo employees ready (%d)", len(DEMO_EMPLOYEES))
    return len(DEMO_EMPLOYEES)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
