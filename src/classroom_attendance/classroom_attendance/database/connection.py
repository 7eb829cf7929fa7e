from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            pool_size=int(db_config.get("pool_size", 5)),
        )


class DatabaseConnection:
    """Pooled connection factory shared by the MySQL repositories.

    Note: Repositories take a connection per operation and give it back on close.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            self._pool = pooling.MySQLConnectionPool(
                pool_name="classroom_attendance",
                pool_size=int(self._config.pool_size),
                pool_reset_session=True,
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
            )
            logger.info(
                "MySQL pool ready: %s@%s:%s/%s",
                self._config.user,
                self._config.host,
                self._config.port,
                self._config.database,
            )
        return self._pool

    def connect(self):
        return self._get_pool().get_connection()
