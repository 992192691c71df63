from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import HalfDayType, LeaveStatus, LeaveType
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
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, number_of_days, is_half_day,
    half_day_type, reason, status, applied_on, approved_by, approved_on, rejection_reason
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=str(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        number_of_days=as_float(r["number_of_days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        is_half_day=as_bool(r.get("is_half_day")),
        half_day_type=HalfDayType(r["half_day_type"]) if r.get("half_day_type") else None,
        applied_on=optional_datetime(r.get("applied_on")),
        approved_by=r.get("approved_by") or "",
        approved_on=optional_datetime(r.get("approved_on")),
        rejection_reason=r.get("rejection_reason") or "",
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(self, request: LeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, number_of_days,
                    is_half_day, half_day_type, reason, status, applied_on
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.employee_id,
                    request.leave_type.value,
                    request.start_date,
                    request.end_date,
                    request.number_of_days,
                    int(request.is_half_day),
                    request.half_day_type.value if request.half_day_type else None,
                    request.reason,
                    request.status.value,
                    request.applied_on or datetime.now(),
                ),
            )
            return int(cur.lastrowid)

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        clauses: list[str] = []
        params: list[object] = []
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start_date is not None:
            clauses.append("start_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("end_date<=%s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {build_where(clauses)}
                ORDER BY applied_on DESC, request_id DESC
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
        employee_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        status_values = [s.value for s in statuses]
        if not status_values:
            return []
        clauses = [
            "start_date<=%s",
            "end_date>=%s",
            f"status IN ({', '.join(['%s'] * len(status_values))})",
        ]
        params: list[object] = [end_date, start_date, *status_values]
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {build_where(clauses)}
                ORDER BY start_date
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def transition(
        self,
        request_id: int,
        *,
        from_status: LeaveStatus,
        to_status: LeaveStatus,
        approved_by: Optional[str] = None,
        approved_on: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s,
                    approved_by=COALESCE(%s, approved_by),
                    approved_on=COALESCE(%s, approved_on),
                    rejection_reason=COALESCE(%s, rejection_reason)
                WHERE request_id=%s AND status=%s
                """,
                (
                    to_status.value,
                    approved_by,
                    approved_on,
                    rejection_reason,
                    int(request_id),
                    from_status.value,
                ),
            )
            return cur.rowcount > 0

    def count_by_status(self, status: LeaveStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM leave_requests WHERE status=%s", (status.value,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def count_approved_since(self, since: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM leave_requests WHERE status=%s AND approved_on>=%s",
                (LeaveStatus.APPROVED.value, since),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
