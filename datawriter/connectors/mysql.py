"""
MySQL Connection Factory

Opens dedicated pymysql connections for data writer workers. Each worker owns
exactly one connection for its whole lifetime, so there is no pooling here.
"""

import logging
from typing import Any, Dict, Optional

import pymysql
from pydantic import BaseModel, Field

from datawriter.config import settings

logger = logging.getLogger(__name__)


class MySQLConfig(BaseModel):
    """Connection parameters for one MySQL server."""

    host: str = Field("127.0.0.1", description="Database host")
    port: int = Field(3306, ge=1, le=65535, description="Database port")
    user: str = Field("root", description="Username")
    password: str = Field("", description="Password")
    database: Optional[str] = Field(None, description="Database selected after connect")
    unix_socket: Optional[str] = Field(
        None, description="Unix socket path; takes precedence over host/port"
    )
    connect_timeout: int = Field(10, ge=1, description="Connect timeout in seconds")
    charset: str = Field("utf8mb4", description="Connection character set")

    @classmethod
    def from_settings(cls) -> "MySQLConfig":
        return cls(
            host=settings.MYSQL_HOST,
            port=settings.MYSQL_PORT,
            user=settings.MYSQL_USER,
            password=settings.MYSQL_PASSWORD,
            database=settings.MYSQL_DATABASE or None,
            unix_socket=settings.MYSQL_SOCKET or None,
            connect_timeout=settings.MYSQL_CONNECT_TIMEOUT,
        )

    def connect_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "user": self.user,
            "password": self.password or "",
            "charset": self.charset,
            # Writes must be visible to the migration tool immediately.
            "autocommit": True,
            "connect_timeout": self.connect_timeout,
        }
        if self.unix_socket:
            params["unix_socket"] = self.unix_socket
        else:
            params["host"] = self.host
            params["port"] = self.port
        if self.database:
            params["database"] = self.database
        return params


class MySQLConnectionFactory:
    """
    Callable that opens a new autocommit pymysql connection per call.

    Usage:
        factory = MySQLConnectionFactory(MySQLConfig.from_settings())
        conn = factory()
    """

    def __init__(self, config: Optional[MySQLConfig] = None):
        self.config = config or MySQLConfig.from_settings()
        target = self.config.unix_socket or f"{self.config.host}:{self.config.port}"
        logger.debug(
            f"MySQL connection factory configured: {self.config.user}@{target}"
            f"/{self.config.database or ''}"
        )

    def __call__(self) -> pymysql.connections.Connection:
        return self.connect()

    def connect(self) -> pymysql.connections.Connection:
        """Open a new connection. Errors propagate to the calling worker."""
        try:
            return pymysql.connect(**self.config.connect_params())
        except pymysql.MySQLError as e:
            logger.error(
                f"Failed to connect to MySQL "
                f"({self.config.unix_socket or self.config.host}): {type(e).__name__}: {e}"
            )
            raise
