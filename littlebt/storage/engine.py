"""
Engine construction for the backing database.

PostgreSQL is the reference target; SQLite URLs are accepted for local
runs and tests.
"""

import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool

from littlebt.config.settings import settings

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: URL) -> bool:
    return url.database in (None, "", ":memory:") or "mode=memory" in str(url)


def create_store_engine(
    url: str | URL | None = None,
    pool_size: int | None = None,
    echo: bool | None = None,
) -> Engine:
    """
    Create an Engine for the row and catalog stores.

    Args:
        url: Connection descriptor. Defaults to settings.get_database_url()
        pool_size: Maximum open connections, no overflow. Defaults to
                   settings.DB_POOL_SIZE (1)
        echo: Log emitted SQL. Defaults to settings.DB_ECHO

    Returns:
        SQLAlchemy Engine
    """
    db_url = make_url(url) if url is not None else settings.get_database_url()
    kwargs: dict[str, Any] = {
        "echo": settings.DB_ECHO if echo is None else echo,
    }

    if db_url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(db_url):
            # A memory database only exists inside its one connection
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_size"] = pool_size or settings.DB_POOL_SIZE
            kwargs["max_overflow"] = 0
            kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
    else:
        kwargs["pool_size"] = pool_size or settings.DB_POOL_SIZE
        kwargs["max_overflow"] = 0
        kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT
        kwargs["pool_pre_ping"] = True

    engine = create_engine(db_url, **kwargs)
    logger.info(f"Engine created for {db_url.render_as_string(hide_password=True)}")
    return engine
