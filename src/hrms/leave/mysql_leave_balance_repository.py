from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..core.enums import LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall
from .model import LeaveBalanceEntry
from .repository import LeaveBalanceRepository

_COLUMNS = "employee_id, year, leave_type, allocated, used, pending, carry_forward, available"


def _to_entry(r: dict) -> LeaveBalanceEntry:
    return LeaveBalanceEntry(
        employee_id=str(r["employee_id"]),
        year=int(r["year"]),
        leave_type=LeaveType(r["leave_type"]),
        allocated=as_float(r["allocated"]),
        used=as_float(r["used"]),
        pending=as_float(r["pending"]),
        carry_forward=as_float(r["carry_forward"]),
        available=as_float(r["available"]),
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, employee_id: str, year: int) -> Sequence[LeaveBalanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                ORDER BY leave_type
                """,
                (employee_id, int(year)),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_for_year(self, year: int) -> Sequence[LeaveBalanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_balances
                WHERE year=%s
                ORDER BY employee_id, leave_type
                """,
                (int(year),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def ensure_entries(self, employee_id: str, year: int, allocations: Mapping[LeaveType, float]) -> int:
        created = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for leave_type, days in allocations.items():
                cur.execute(
                    """
                    INSERT IGNORE INTO leave_balances(employee_id, year, leave_type, allocated, available)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (employee_id, int(year), leave_type.value, days, days),
                )
                created += max(cur.rowcount, 0)
        return created

    def adjust(
        self,
        *,
        employee_id: str,
        year: int,
        leave_type: LeaveType,
        used_delta: float = 0,
        pending_delta: float = 0,
        require_available: Optional[float] = None,
    ) -> bool:
        # Assignments run left to right, so available sees the new used/pending.
        sql = """
            UPDATE leave_balances
            SET used=used+%s, pending=pending+%s, available=allocated+carry_forward-used-pending
            WHERE employee_id=%s AND year=%s AND leave_type=%s
        """
        params: list[object] = [used_delta, pending_delta, employee_id, int(year), leave_type.value]
        if require_available is not None:
            sql += " AND available>=%s"
            params.append(require_available)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return cur.rowcount > 0
