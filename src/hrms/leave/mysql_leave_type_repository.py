from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import LeaveTypePolicy
from .repository import LeaveTypeRepository

_COLUMNS = (
    "type_id, name, code, default_days, is_paid, carry_forward, max_carry_forward, description, is_active"
)


def _to_policy(r: dict) -> LeaveTypePolicy:
    return LeaveTypePolicy(
        type_id=int(r["type_id"]),
        name=LeaveType(r["name"]),
        code=r["code"],
        default_days=as_float(r.get("default_days")),
        is_paid=as_bool(r.get("is_paid", 1)),
        carry_forward=as_bool(r.get("carry_forward")),
        max_carry_forward=as_float(r.get("max_carry_forward")),
        description=r.get("description") or "",
        is_active=as_bool(r.get("is_active", 1)),
    )


def _params(policy: LeaveTypePolicy) -> tuple:
    return (
        policy.name.value,
        policy.code,
        policy.default_days,
        int(policy.is_paid),
        int(policy.carry_forward),
        policy.max_carry_forward,
        policy.description,
        int(policy.is_active),
    )


class MySQLLeaveTypeRepository(LeaveTypeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, type_id: int) -> Optional[LeaveTypePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_types WHERE type_id=%s", (int(type_id),))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def get_by_name(self, name: LeaveType) -> Optional[LeaveTypePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_types WHERE name=%s", (LeaveType(name).value,))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveTypePolicy]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_types {where} ORDER BY name")
            return [_to_policy(r) for r in fetchall(cur)]

    def create(self, policy: LeaveTypePolicy) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO leave_types(
                        name, code, default_days, is_paid, carry_forward, max_carry_forward, description, is_active
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    _params(policy),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def update(self, policy: LeaveTypePolicy) -> Optional[bool]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE leave_types
                    SET name=%s, code=%s, default_days=%s, is_paid=%s, carry_forward=%s,
                        max_carry_forward=%s, description=%s, is_active=%s
                    WHERE type_id=%s
                    """,
                    (*_params(policy), int(policy.type_id)),
                )
                if cur.rowcount > 0:
                    return True
                cur.execute("SELECT 1 AS ok FROM leave_types WHERE type_id=%s", (int(policy.type_id),))
                return fetchone(cur) is not None
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def upsert_by_name(self, policy: LeaveTypePolicy) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_types(
                    name, code, default_days, is_paid, carry_forward, max_carry_forward, description, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    code=VALUES(code), default_days=VALUES(default_days), is_paid=VALUES(is_paid),
                    carry_forward=VALUES(carry_forward), max_carry_forward=VALUES(max_carry_forward),
                    is_active=VALUES(is_active)
                """,
                _params(policy),
            )
