from __future__ import annotations

import sys
import types

from hrms.database.connection import DatabaseConnection, DBConfig


def test_from_dict_fills_defaults():
    config = DBConfig.from_dict({"host": "db", "port": "3307", "password": None})
    assert config == DBConfig(host="db", port=3307, user="root", password="", database="hrms_db")


def test_from_settings_reads_db_config(monkeypatch):
    settings = types.ModuleType("hrms_site_settings")
    settings.DB_CONFIG = {"host": "mysql.internal", "user": "hr", "password": "pw", "database": "payroll"}
    monkeypatch.setitem(sys.modules, "hrms_site_settings", settings)

    config = DBConfig.from_settings("hrms_site_settings")
    assert (config.host, config.port, config.user, config.database) == ("mysql.internal", 3306, "hr", "payroll")


def test_connect_kwargs_without_database():
    kwargs = DBConfig(database="payroll").connect_kwargs(with_database=False)
    assert "database" not in kwargs
    assert kwargs["charset"] == "utf8mb4"
    assert DBConfig(database="payroll").connect_kwargs()["database"] == "payroll"


def test_one_factory_per_target():
    main = DatabaseConnection.get_instance(DBConfig(database="hrms_db"))
    assert DatabaseConnection.get_instance(DBConfig(database="hrms_db")) is main

    other = DatabaseConnection.get_instance(DBConfig(database="hrms_test"))
    assert other is not main
    assert other.config.database == "hrms_test"
