from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional

import mysql.connector

from ..settings import get_settings_module


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "hrms_db"

    @classmethod
    def from_dict(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        defaults = cls()
        return cls(
            host=str(db_config.get("host") or defaults.host),
            port=int(db_config.get("port") or defaults.port),
            user=str(db_config.get("user") or defaults.user),
            password=str(db_config.get("password") or ""),
            database=str(db_config.get("database") or defaults.database),
        )

    @classmethod
    def from_settings(cls, settings_module: Optional[str] = None) -> "DBConfig":
        """DB_CONFIG of the active settings module (APP_ENV) unless one is named."""
        settings = importlib.import_module(settings_module or get_settings_module())
        return cls.from_dict(getattr(settings, "DB_CONFIG", {}))

    def connect_kwargs(self, *, with_database: bool = True) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "charset": "utf8mb4",
            "use_pure": True,
        }
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Connection factory, one shared instance per database target.

    Every repository call opens a short-lived connection through ``connect``.
    """

    _instances: ClassVar[dict[DBConfig, "DatabaseConnection"]] = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: Optional[DBConfig] = None) -> "DatabaseConnection":
        config = config or DBConfig.from_settings()
        if config not in cls._instances:
            cls._instances[config] = cls(config)
        return cls._instances[config]

    def connect(self, *, with_database: bool = True):
        return mysql.connector.connect(**self._config.connect_kwargs(with_database=with_database))
