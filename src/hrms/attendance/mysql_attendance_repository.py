from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import ApprovalStatus, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_bool,
    as_float,
    build_where,
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    optional_datetime,
)
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, status, punch_in, punch_out, working_hours,
    approval_status, is_manual_correction, correction_reason, correction_requested_by,
    original_status, original_punch_in, original_punch_out,
    approved_by, approval_date, approval_remarks, remarks
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        punch_in=optional_datetime(r.get("punch_in")),
        punch_out=optional_datetime(r.get("punch_out")),
        working_hours=as_float(r.get("working_hours")),
        approval_status=ApprovalStatus(r.get("approval_status") or ApprovalStatus.NONE.value),
        is_manual_correction=as_bool(r.get("is_manual_correction")),
        correction_reason=r.get("correction_reason") or "",
        correction_requested_by=r.get("correction_requested_by") or "",
        original_status=AttendanceStatus(r["original_status"]) if r.get("original_status") else None,
        original_punch_in=optional_datetime(r.get("original_punch_in")),
        original_punch_out=optional_datetime(r.get("original_punch_out")),
        approved_by=r.get("approved_by") or "",
        approval_date=optional_datetime(r.get("approval_date")),
        approval_remarks=r.get("approval_remarks") or "",
        remarks=r.get("remarks") or "",
    )


def _workflow_params(record: AttendanceRecord) -> tuple:
    return (
        record.status.value,
        record.punch_in,
        record.punch_out,
        record.working_hours,
        record.approval_status.value,
        int(record.is_manual_correction),
        record.correction_reason,
        record.correction_requested_by,
        record.original_status.value if record.original_status else None,
        record.original_punch_in,
        record.original_punch_out,
        record.approved_by,
        record.approval_date,
        record.approval_remarks,
    )


_WORKFLOW_SET = """
    status=%s, punch_in=%s, punch_out=%s, working_hours=%s,
    approval_status=%s, is_manual_correction=%s, correction_reason=%s, correction_requested_by=%s,
    original_status=%s, original_punch_in=%s, original_punch_out=%s,
    approved_by=%s, approval_date=%s, approval_remarks=%s
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        approval_status: Optional[ApprovalStatus] = None,
        newest_first: bool = True,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if start_date is not None:
            clauses.append("work_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date<=%s")
            params.append(end_date)
        if approval_status is not None:
            clauses.append("approval_status=%s")
            params.append(approval_status.value)

        order = "DESC" if newest_first else "ASC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {build_where(clauses)}
                ORDER BY work_date {order}, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_punch_in(
        self,
        *,
        employee_id: str,
        work_date: date,
        punch_in: datetime,
        status: AttendanceStatus,
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, punch_in, status)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (employee_id, work_date, punch_in, status.value),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def set_punch_in(self, *, attendance_id: int, punch_in: datetime, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET punch_in=%s, status=%s
                WHERE attendance_id=%s AND punch_in IS NULL
                """,
                (punch_in, status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def set_punch_out(
        self,
        *,
        attendance_id: int,
        punch_out: datetime,
        status: AttendanceStatus,
        working_hours: float,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET punch_out=%s, status=%s, working_hours=%s
                WHERE attendance_id=%s AND punch_in IS NOT NULL AND punch_out IS NULL
                """,
                (punch_out, status.value, working_hours, int(attendance_id)),
            )
            return cur.rowcount > 0

    def create_record(self, record: AttendanceRecord) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, status, punch_in, punch_out, working_hours,
                        approval_status, is_manual_correction, correction_reason, correction_requested_by,
                        original_status, original_punch_in, original_punch_out,
                        approved_by, approval_date, approval_remarks, remarks
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (record.employee_id, record.work_date, *_workflow_params(record), record.remarks),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def update_record(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET employee_id=%s, work_date=%s, status=%s, punch_in=%s, punch_out=%s,
                    working_hours=%s, remarks=%s
                WHERE attendance_id=%s
                """,
                (
                    record.employee_id,
                    record.work_date,
                    record.status.value,
                    record.punch_in,
                    record.punch_out,
                    record.working_hours,
                    record.remarks,
                    int(record.attendance_id),
                ),
            )
            # rowcount is 0 when nothing changed, so re-check existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS ok FROM attendance_records WHERE attendance_id=%s", (int(record.attendance_id),))
            return fetchone(cur) is not None

    def apply_correction(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {_WORKFLOW_SET}
                WHERE attendance_id=%s AND approval_status<>%s
                """,
                (*_workflow_params(record), int(record.attendance_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def decide_correction(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {_WORKFLOW_SET}
                WHERE attendance_id=%s AND approval_status=%s
                """,
                (*_workflow_params(record), int(record.attendance_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def count_by_approval_status(self, approval_status: ApprovalStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM attendance_records WHERE approval_status=%s",
                (approval_status.value,),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id:
            clauses.append("ar.employee_id=%s")
            params.append(employee_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.employee_id, e.full_name, e.department,
                    ar.work_date, ar.status, ar.punch_in, ar.punch_out, ar.working_hours,
                    ar.approval_status, ar.remarks
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                WHERE {build_where(clauses)}
                ORDER BY ar.work_date DESC, ar.employee_id ASC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    employee_id=str(r["employee_id"]),
                    full_name=r["full_name"],
                    department=r["department"],
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                    punch_in=optional_datetime(r.get("punch_in")),
                    punch_out=optional_datetime(r.get("punch_out")),
                    working_hours=as_float(r.get("working_hours")),
                    approval_status=ApprovalStatus(r.get("approval_status") or ApprovalStatus.NONE.value),
                    remarks=r.get("remarks") or "",
                )
                for r in fetchall(cur)
            ]
