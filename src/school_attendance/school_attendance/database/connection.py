from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling
from mysql.connector.constants import ClientFlag


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 0
    connect_timeout: int = 10


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: Repositories borrow a short-lived connection per operation unless a
    transaction is open (see mysql_base.transaction). With pool_size > 0 the
    connections come from a mysql-connector pool.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _connect_kwargs(self) -> dict:
        return dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connect_timeout),
            autocommit=False,
            # rowcount reports matched rows, so an UPDATE to identical values still counts
            client_flags=[ClientFlag.FOUND_ROWS],
        )

    def connect(self):
        if self._config.pool_size > 0:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="school_attendance",
                    pool_size=int(self._config.pool_size),
                    **self._connect_kwargs(),
                )
            return self._pool.get_connection()
        return mysql.connector.connect(**self._connect_kwargs())
