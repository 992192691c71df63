from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=str(row["employee_id"]),
        full_name=row["full_name"],
        email=row["email"],
        department=row["department"],
        designation=row.get("designation") or "",
        is_active=as_bool(row.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, email, department, designation, is_active
                FROM employees
                WHERE employee_id=%s
                """,
                (employee_id,),
            )
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, email, department, designation, is_active
                FROM employees
                WHERE is_active=1
                ORDER BY employee_id
                """
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employees WHERE is_active=1")
            row = fetchone(cur)
            return int(row["n"]) if row else 0
