from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Iterable, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import PaymentMode, PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_bool,
    as_float,
    build_where,
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    is_duplicate_key,
    load_json,
    optional_datetime,
)
from .model import Payroll, PayrollAttendance
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, month, year, earnings, deductions, attendance,
    gross_earnings, total_deductions, net_payable, status,
    processed_by, processed_on, approved_by, approved_on, paid_on,
    payment_mode, transaction_id, remarks, is_locked
"""


def _amounts(raw) -> dict[str, float]:
    return {k: float(v or 0) for k, v in load_json(raw).items()}


def _to_attendance(raw) -> PayrollAttendance:
    data = load_json(raw)
    return PayrollAttendance(
        working_days=int(data.get("working_days", 0)),
        present_days=float(data.get("present_days", 0)),
        absent_days=int(data.get("absent_days", 0)),
        lop_days=float(data.get("lop_days", 0)),
        paid_leave_days=float(data.get("paid_leave_days", 0)),
        holidays=int(data.get("holidays", 0)),
        weekoffs=int(data.get("weekoffs", 0)),
    )


def _to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=str(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        earnings=_amounts(r.get("earnings")),
        deductions=_amounts(r.get("deductions")),
        attendance=_to_attendance(r.get("attendance")),
        gross_earnings=as_float(r["gross_earnings"]),
        total_deductions=as_float(r["total_deductions"]),
        net_payable=as_float(r["net_payable"]),
        status=PayrollStatus(r["status"]),
        processed_by=r.get("processed_by") or "",
        processed_on=optional_datetime(r.get("processed_on")),
        approved_by=r.get("approved_by") or "",
        approved_on=optional_datetime(r.get("approved_on")),
        paid_on=optional_datetime(r.get("paid_on")),
        payment_mode=PaymentMode(r.get("payment_mode") or PaymentMode.BANK_TRANSFER.value),
        transaction_id=r.get("transaction_id") or "",
        remarks=r.get("remarks") or "",
        is_locked=as_bool(r.get("is_locked")),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def get_for_period(self, employee_id: str, month: int, year: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payrolls WHERE employee_id=%s AND month=%s AND year=%s",
                (employee_id, int(month), int(year)),
            )
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[str] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[Payroll]:
        clauses: list[str] = []
        params: list[object] = []
        if month is not None:
            clauses.append("month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payrolls
                WHERE {build_where(clauses)}
                ORDER BY year DESC, month DESC, employee_id
                """,
                tuple(params),
            )
            return [_to_payroll(r) for r in fetchall(cur)]

    def create(self, payroll: Payroll) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payrolls(
                        employee_id, month, year, earnings, deductions, attendance,
                        gross_earnings, total_deductions, net_payable, status,
                        processed_by, processed_on, remarks
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        payroll.employee_id,
                        payroll.month,
                        payroll.year,
                        dump_json(payroll.earnings),
                        dump_json(payroll.deductions),
                        dump_json(asdict(payroll.attendance)),
                        payroll.gross_earnings,
                        payroll.total_deductions,
                        payroll.net_payable,
                        payroll.status.value,
                        payroll.processed_by,
                        payroll.processed_on,
                        payroll.remarks,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def overwrite_unlocked(self, payroll: Payroll) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET earnings=%s, deductions=%s, attendance=%s,
                    gross_earnings=%s, total_deductions=%s, net_payable=%s,
                    status=%s, processed_by=%s, processed_on=%s,
                    approved_by='', approved_on=NULL
                WHERE employee_id=%s AND month=%s AND year=%s AND is_locked=0
                """,
                (
                    dump_json(payroll.earnings),
                    dump_json(payroll.deductions),
                    dump_json(asdict(payroll.attendance)),
                    payroll.gross_earnings,
                    payroll.total_deductions,
                    payroll.net_payable,
                    payroll.status.value,
                    payroll.processed_by,
                    payroll.processed_on,
                    payroll.employee_id,
                    payroll.month,
                    payroll.year,
                ),
            )
            # rowcount counts changed rows only; identical reprocessing still succeeded.
            if cur.rowcount > 0:
                return True
            cur.execute(
                "SELECT 1 FROM payrolls WHERE employee_id=%s AND month=%s AND year=%s AND is_locked=0",
                (payroll.employee_id, payroll.month, payroll.year),
            )
            return fetchone(cur) is not None

    def lock_period(self, month: int, year: int, *, statuses: Iterable[PayrollStatus]) -> int:
        values = [s.value for s in statuses]
        if not values:
            return 0
        placeholders = ", ".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE payrolls
                SET is_locked=1, status=%s
                WHERE month=%s AND year=%s AND is_locked=0 AND status IN ({placeholders})
                """,
                (PayrollStatus.LOCKED.value, int(month), int(year), *values),
            )
            return cur.rowcount

    def approve(self, payroll_id: int, *, approved_by: str, approved_on: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET status=%s, approved_by=%s, approved_on=%s
                WHERE payroll_id=%s AND status=%s AND is_locked=0
                """,
                (
                    PayrollStatus.APPROVED.value,
                    approved_by,
                    approved_on,
                    int(payroll_id),
                    PayrollStatus.PROCESSED.value,
                ),
            )
            return cur.rowcount > 0

    def mark_paid(
        self,
        payroll_id: int,
        *,
        payment_mode: PaymentMode,
        transaction_id: str,
        paid_on: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET status=%s, payment_mode=%s, transaction_id=%s, paid_on=%s
                WHERE payroll_id=%s AND status=%s AND is_locked=0
                """,
                (
                    PayrollStatus.PAID.value,
                    payment_mode.value,
                    transaction_id,
                    paid_on,
                    int(payroll_id),
                    PayrollStatus.APPROVED.value,
                ),
            )
            return cur.rowcount > 0
