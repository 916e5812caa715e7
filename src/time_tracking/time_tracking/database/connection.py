from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "time_tracking")),
            connection_timeout=int(db_config.get("connection_timeout", 10)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: outside a transaction every operation gets a short-lived connection.
    Inside ``MySQLTransactionManager.atomic()`` one connection is bound to the
    current thread and reused by all repositories until commit/rollback.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self, *, database: bool = True):
        kwargs: dict[str, Any] = dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            connection_timeout=self._config.connection_timeout,
        )
        if database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)

    @property
    def database_name(self) -> str:
        return self._config.database

    def bound_connection(self):
        return getattr(self._local, "conn", None)

    def bind(self, conn) -> None:
        self._local.conn = conn

    def unbind(self) -> None:
        self._local.conn = None
