from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import BonusStatus, BonusType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_bool,
    as_float,
    build_where,
    db_cursor,
    fetchall,
    fetchone,
    optional_datetime,
)
from .model import Bonus
from .repository import BonusRepository

_COLUMNS = """
    bonus_id, employee_id, bonus_type, amount, month, year, reason, status,
    approved_by, approved_on, included_in_payroll, created_at
"""


def _to_bonus(r: dict) -> Bonus:
    return Bonus(
        bonus_id=int(r["bonus_id"]),
        employee_id=str(r["employee_id"]),
        bonus_type=BonusType(r["bonus_type"]),
        amount=as_float(r["amount"]),
        month=int(r["month"]),
        year=int(r["year"]),
        reason=r.get("reason") or "",
        status=BonusStatus(r["status"]),
        approved_by=r.get("approved_by") or "",
        approved_on=optional_datetime(r.get("approved_on")),
        included_in_payroll=as_bool(r.get("included_in_payroll")),
        created_at=optional_datetime(r.get("created_at")),
    )


class MySQLBonusRepository(BonusRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, bonus_id: int) -> Optional[Bonus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM bonuses WHERE bonus_id=%s", (int(bonus_id),))
            r = fetchone(cur)
            return _to_bonus(r) if r else None

    def create(self, bonus: Bonus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO bonuses(employee_id, bonus_type, amount, month, year, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    bonus.employee_id,
                    bonus.bonus_type.value,
                    bonus.amount,
                    bonus.month,
                    bonus.year,
                    bonus.reason,
                    bonus.status.value,
                ),
            )
            return int(cur.lastrowid)

    def list_bonuses(
        self,
        *,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[BonusStatus] = None,
    ) -> Sequence[Bonus]:
        clauses: list[str] = []
        params: list[object] = []
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if month is not None:
            clauses.append("month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM bonuses
                WHERE {build_where(clauses)}
                ORDER BY created_at DESC, bonus_id DESC
                """,
                tuple(params),
            )
            return [_to_bonus(r) for r in fetchall(cur)]

    def list_for_payroll(self, employee_id: str, month: int, year: int) -> Sequence[Bonus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM bonuses
                WHERE employee_id=%s AND month=%s AND year=%s AND status=%s AND included_in_payroll=0
                ORDER BY bonus_id
                """,
                (employee_id, int(month), int(year), BonusStatus.APPROVED.value),
            )
            return [_to_bonus(r) for r in fetchall(cur)]

    def mark_included(self, bonus_ids: Sequence[int]) -> int:
        if not bonus_ids:
            return 0
        placeholders = ", ".join(["%s"] * len(bonus_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE bonuses SET included_in_payroll=1 WHERE bonus_id IN ({placeholders})",
                tuple(int(b) for b in bonus_ids),
            )
            return cur.rowcount

    def approve(self, bonus_id: int, *, approved_by: str, approved_on: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE bonuses
                SET status=%s, approved_by=%s, approved_on=%s
                WHERE bonus_id=%s AND status=%s
                """,
                (BonusStatus.APPROVED.value, approved_by, approved_on, int(bonus_id), BonusStatus.PENDING.value),
            )
            return cur.rowcount > 0
