from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool, PoolTimeout

from discharge_pipeline.config.settings import Settings
from discharge_pipeline.logging.logger import Log

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    """Connection string for the configured database. Values are quoted as needed."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def init_pool(settings: Settings) -> None:
    """Open the global connection pool and wait until it can serve connections.

    Raises:
        PoolTimeout: if no connection is established within
            ``db_connect_timeout_seconds``. The pool is closed again.
    """
    global _pool  # noqa: PLW0603
    pool = ConnectionPool(
        build_conninfo(settings),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_connect_timeout_seconds,
        open=True,
    )
    try:
        pool.wait(timeout=settings.db_connect_timeout_seconds)
    except PoolTimeout:
        Log.error(
            "Database unreachable",
            host=settings.db_host,
            port=settings.db_port,
            dbname=settings.db_database,
        )
        pool.close()
        raise
    _pool = pool
    Log.info(
        "Connection pool ready",
        dbname=settings.db_database,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn


def apply_schema(schema_path: Path | None = None) -> None:
    """Create the pipeline tables if they do not exist yet."""
    sql = (schema_path or SCHEMA_PATH).read_text(encoding="utf-8")
    with get_connection() as conn:
        conn.execute(sql)
        conn.commit()
