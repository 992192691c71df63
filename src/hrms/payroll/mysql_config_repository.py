from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_float, db_cursor, dump_json, fetchone, load_json
from .model import PayrollConfig, TaxSlab
from .repository import PayrollConfigRepository

_COLUMNS = """
    config_id, pf_percentage, esi_percentage, esi_threshold, professional_tax_slab,
    payroll_processing_day, payment_day, financial_year_start, is_active
"""


def _to_config(r: dict) -> PayrollConfig:
    slabs = load_json(r.get("professional_tax_slab"), default=[])
    return PayrollConfig(
        config_id=int(r["config_id"]),
        pf_percentage=as_float(r["pf_percentage"]),
        esi_percentage=as_float(r["esi_percentage"]),
        esi_threshold=as_float(r["esi_threshold"]),
        professional_tax_slab=[
            TaxSlab(min_salary=float(s["min_salary"]), max_salary=float(s["max_salary"]), tax=float(s["tax"]))
            for s in slabs
        ],
        payroll_processing_day=int(r["payroll_processing_day"]),
        payment_day=int(r["payment_day"]),
        financial_year_start=int(r["financial_year_start"]),
        is_active=as_bool(r.get("is_active", 1)),
    )


def _params(config: PayrollConfig) -> tuple:
    slabs = [asdict(s) for s in config.professional_tax_slab]
    return (
        config.pf_percentage,
        config.esi_percentage,
        config.esi_threshold,
        dump_json(slabs),
        config.payroll_processing_day,
        config.payment_day,
        config.financial_year_start,
        int(config.is_active),
    )


class MySQLPayrollConfigRepository(PayrollConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self) -> Optional[PayrollConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_config WHERE is_active=1 ORDER BY config_id LIMIT 1")
            r = fetchone(cur)
            return _to_config(r) if r else None

    def save(self, config: PayrollConfig) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if not config.config_id:
                cur.execute(
                    """
                    INSERT INTO payroll_config(
                        pf_percentage, esi_percentage, esi_threshold, professional_tax_slab,
                        payroll_processing_day, payment_day, financial_year_start, is_active
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    _params(config),
                )
                return int(cur.lastrowid)
            cur.execute(
                """
                UPDATE payroll_config
                SET pf_percentage=%s, esi_percentage=%s, esi_threshold=%s, professional_tax_slab=%s,
                    payroll_processing_day=%s, payment_day=%s, financial_year_start=%s, is_active=%s
                WHERE config_id=%s
                """,
                (*_params(config), int(config.config_id)),
            )
            return int(config.config_id)
