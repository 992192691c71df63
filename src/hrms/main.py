from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.config import WorkConfig
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .corrections.controller import register as register_corrections
from .database.bootstrap import apply_schema, ensure_demo_employees, list_tables
from .leave.controller import register as register_leave
from .payroll.controller import register as register_payroll
from .settings import get_settings_module

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass a prebuilt container to skip MySQL wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False

    level = getattr(settings, "LOG_LEVEL", "DEBUG" if app.config["DEBUG"] else "INFO")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            n = ensure_demo_employees(db_config)
            logger.info("demo employees ready (%d)", n)

        container = build_container(
            db_config=db_config,
            work_config=WorkConfig.from_dict(getattr(settings, "WORK_CONFIG", None)),
            company={
                "name": getattr(settings, "COMPANY_NAME", "HRMS Lite Company"),
                "address": getattr(settings, "COMPANY_ADDRESS", "Company Address Here"),
            },
        )

    register_error_handlers(app)
    register_attendance(app, container)
    register_corrections(app, container)
    register_leave(app, container)
    register_payroll(app, container)

    return app
