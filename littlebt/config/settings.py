"""
Configuration settings for LittleBT.

Connection values for the backing relational database, pool sizing, and
logging/metrics switches. Every value can be overridden through the
environment; `get_database_url` composes the connection descriptor.
"""

import os
from typing import Any, Dict, Optional

from sqlalchemy.engine import URL, make_url


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


_SSL_MODES = ("", "disable", "allow", "prefer", "require", "verify-ca", "verify-full")


class Settings:
    """LittleBT configuration settings"""

    FRAMEWORK_NAME = "littlebt"

    # Database settings
    DB_DRIVER = os.getenv("DB_DRIVER", "postgresql+psycopg2")
    DB_USERNAME = os.getenv("DB_USERNAME", "")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = int(os.getenv("DB_PORT", "5432"))
    DB_NAME = os.getenv("DB_NAME", "bigtable")
    DATABASE_URL = os.getenv("DATABASE_URL", "")
    # libpq sslmode for the composed descriptor; empty leaves it unset
    DB_SSLMODE = os.getenv("DB_SSLMODE", "disable")

    # The reference deployment pins the process to one open connection
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "1"))
    DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_ECHO = _env_bool("DB_ECHO", False)

    # Rows fetched per round of a streaming scan
    SCAN_BATCH_SIZE = int(os.getenv("SCAN_BATCH_SIZE", "500"))

    # Relation names
    ROWS_TABLE = "rows_t"
    TABLES_TABLE = "tables_t"

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Monitoring
    METRICS_ENABLED = _env_bool("METRICS_ENABLED", True)

    @classmethod
    def get_database_url(
        cls,
        username: Optional[str] = None,
        password: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        database_url: Optional[str] = None,
        sslmode: Optional[str] = None,
    ) -> URL:
        """
        Build the connection descriptor.

        An explicit `database_url` (or the DATABASE_URL environment value)
        wins over the individual parts, and its query string is kept as
        given. A composed descriptor carries `sslmode` (DB_SSLMODE by
        default) unless it is empty.
        """
        explicit = database_url or cls.DATABASE_URL
        if explicit:
            return make_url(explicit)

        mode = sslmode if sslmode is not None else cls.DB_SSLMODE
        return URL.create(
            cls.DB_DRIVER,
            username=username if username is not None else (cls.DB_USERNAME or None),
            password=password if password is not None else (cls.DB_PASSWORD or None),
            host=host or cls.DB_HOST,
            port=port or cls.DB_PORT,
            database=database or cls.DB_NAME,
            query={"sslmode": mode} if mode else {},
        )

    @classmethod
    def get_storage_config(cls) -> Dict[str, Any]:
        """Get storage configuration"""
        return {
            "database_url": cls.get_database_url().render_as_string(hide_password=True),
            "pool_size": cls.DB_POOL_SIZE,
            "pool_timeout": cls.DB_POOL_TIMEOUT,
            "echo": cls.DB_ECHO,
            "scan_batch_size": cls.SCAN_BATCH_SIZE,
            "rows_table": cls.ROWS_TABLE,
            "tables_table": cls.TABLES_TABLE,
        }

    @classmethod
    def get_logging_config(cls) -> Dict[str, Any]:
        """Get logging configuration"""
        return {
            "level": cls.LOG_LEVEL,
            "format": cls.LOG_FORMAT,
        }

    @classmethod
    def validate_config(cls) -> bool:
        """Validate configuration settings"""
        if cls.SCAN_BATCH_SIZE < 1:
            raise ValueError("SCAN_BATCH_SIZE must be at least 1")

        if cls.DB_POOL_SIZE < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")

        if not 0 < cls.DB_PORT < 65536:
            raise ValueError("DB_PORT must be a valid TCP port")

        if cls.DB_SSLMODE not in _SSL_MODES:
            raise ValueError(f"Unsupported DB_SSLMODE: {cls.DB_SSLMODE}")

        if cls.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported LOG_LEVEL: {cls.LOG_LEVEL}")

        return True


settings = Settings()
