from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10


class DatabaseConnection:
    """Process-wide factory for short-lived MySQL connections.

    Each repository call opens its own connection through ``db_cursor`` and
    closes it afterwards; no connection outlives a request.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        # utf8mb4 so student ids and batch names round-trip through JSON paths unchanged
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            charset="utf8mb4",
            collation="utf8mb4_unicode_ci",
            connection_timeout=int(self._config.connect_timeout),
        )
