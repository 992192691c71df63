from __future__ import annotations

import importlib

from dotenv import load_dotenv

from hrms.container import build_container
from hrms.database.bootstrap import ensure_demo_employees
from hrms.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    n = ensure_demo_employees(db_config)
    container = build_container(db_config=db_config)
    container.leave_type_service.initialize_leave_types()
    container.leave_service.initialize_all_balances()
    container.holiday_service.initialize_holidays()

    print(
        f"OK: Seeded {n} employees, leave types, leave balances and holidays -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
