from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import SalaryStructure
from .repository import SalaryStructureRepository

_COLUMNS = """
    structure_id, employee_id, basic, hra, allowances, deductions,
    gross_salary, net_salary, ctc, effective_from, is_active
"""


def _amounts(raw) -> dict[str, float]:
    return {k: float(v or 0) for k, v in load_json(raw).items()}


def _to_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        structure_id=int(r["structure_id"]),
        employee_id=str(r["employee_id"]),
        basic=as_float(r["basic"]),
        hra=as_float(r["hra"]),
        allowances=_amounts(r.get("allowances")),
        deductions=_amounts(r.get("deductions")),
        gross_salary=as_float(r["gross_salary"]),
        net_salary=as_float(r["net_salary"]),
        ctc=as_float(r["ctc"]),
        effective_from=r.get("effective_from"),
        is_active=as_bool(r.get("is_active", 1)),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, employee_id: str) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_structures WHERE employee_id=%s AND is_active=1",
                (employee_id,),
            )
            r = fetchone(cur)
            return _to_structure(r) if r else None

    def list_active(self) -> Sequence[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE is_active=1 ORDER BY employee_id")
            return [_to_structure(r) for r in fetchall(cur)]

    def upsert(self, structure: SalaryStructure) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_structures(
                    employee_id, basic, hra, allowances, deductions,
                    gross_salary, net_salary, ctc, effective_from, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE
                    structure_id=LAST_INSERT_ID(structure_id),
                    basic=VALUES(basic), hra=VALUES(hra),
                    allowances=VALUES(allowances), deductions=VALUES(deductions),
                    gross_salary=VALUES(gross_salary), net_salary=VALUES(net_salary), ctc=VALUES(ctc),
                    effective_from=VALUES(effective_from), is_active=1
                """,
                (
                    structure.employee_id,
                    structure.basic,
                    structure.hra,
                    dump_json(structure.allowances),
                    dump_json(structure.deductions),
                    structure.gross_salary,
                    structure.net_salary,
                    structure.ctc,
                    structure.effective_from,
                ),
            )
            return int(cur.lastrowid)
