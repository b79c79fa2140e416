import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from discharge_pipeline.config.settings import Settings
from discharge_pipeline.database.connection import (
    apply_schema,
    close_pool,
    get_connection,
    init_pool,
)


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "discharge_pipeline_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    """A pooled connection on freshly emptied pipeline tables."""
    with get_connection() as conn:
        conn.execute("TRUNCATE discharge_documents, pipeline_events RESTART IDENTITY")
        conn.commit()
        yield conn
