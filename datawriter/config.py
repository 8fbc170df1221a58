"""
Application Configuration using Pydantic Settings

Loads configuration from environment variables with sensible defaults.
"""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # ========================================================================
    # MySQL Connection Settings
    # ========================================================================
    MYSQL_HOST: str = "127.0.0.1"
    MYSQL_PORT: int = 29291
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    # Database selected after connecting. Tables may still be fully qualified
    # ("db.table"), in which case this can stay empty.
    MYSQL_DATABASE: str = ""
    # If set, connect over the unix socket instead of host/port.
    MYSQL_SOCKET: str = ""
    MYSQL_CONNECT_TIMEOUT: int = 10

    # ========================================================================
    # Data Writer Defaults
    # ========================================================================
    DATAWRITER_DEFAULT_TABLE: str = "gftest.test_table_1"
    DATAWRITER_NUMBER_OF_WRITERS: int = 1
    DATAWRITER_INSERT_PROBABILITY: float = 0.33
    DATAWRITER_UPDATE_PROBABILITY: float = 0.33
    DATAWRITER_DELETE_PROBABILITY: float = 0.34

    # Pause between writes of a single worker. Keeps row state readable by
    # concurrent verifiers instead of being rewritten on every read.
    DATAWRITER_WRITE_INTERVAL_SECONDS: float = 0.03

    # ========================================================================
    # Logging Settings
    # ========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Create global settings instance
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts. Library code never calls this."""
    logging.basicConfig(
        level=getattr(logging, str(level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )
    logging.getLogger("pymysql").setLevel(logging.WARNING)
