from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import HolidayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Holiday
from .repository import HolidayRepository

_COLUMNS = "holiday_id, name, holiday_date, year, holiday_type, description, is_optional, is_active"


def _to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        name=r["name"],
        holiday_date=r["holiday_date"],
        year=int(r["year"]),
        holiday_type=HolidayType(r["holiday_type"]),
        description=r.get("description") or "",
        is_optional=as_bool(r.get("is_optional")),
        is_active=as_bool(r.get("is_active", 1)),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def list_for_year(self, year: int) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM holidays WHERE year=%s AND is_active=1 ORDER BY holiday_date",
                (int(year),),
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def list_between(self, start_date: date, end_date: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM holidays
                WHERE holiday_date BETWEEN %s AND %s AND is_active=1
                ORDER BY holiday_date
                """,
                (start_date, end_date),
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def create(self, holiday: Holiday) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(name, holiday_date, year, holiday_type, description, is_optional, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    holiday.name,
                    holiday.holiday_date,
                    holiday.year,
                    holiday.holiday_type.value,
                    holiday.description,
                    int(holiday.is_optional),
                    int(holiday.is_active),
                ),
            )
            return int(cur.lastrowid)

    def update(self, holiday: Holiday) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE holidays
                SET name=%s, holiday_date=%s, year=%s, holiday_type=%s, description=%s, is_optional=%s, is_active=%s
                WHERE holiday_id=%s
                """,
                (
                    holiday.name,
                    holiday.holiday_date,
                    holiday.year,
                    holiday.holiday_type.value,
                    holiday.description,
                    int(holiday.is_optional),
                    int(holiday.is_active),
                    int(holiday.holiday_id),
                ),
            )
            return cur.rowcount > 0

    def upsert_by_name(self, holiday: Holiday) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(name, holiday_date, year, holiday_type, description, is_optional, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE holiday_date=VALUES(holiday_date), holiday_type=VALUES(holiday_type), is_active=1
                """,
                (
                    holiday.name,
                    holiday.holiday_date,
                    holiday.year,
                    holiday.holiday_type.value,
                    holiday.description,
                    int(holiday.is_optional),
                ),
            )

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0
