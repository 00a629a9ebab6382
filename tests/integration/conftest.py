# tests/integration/conftest.py
from __future__ import annotations

import pytest

from eventhub.database.core.main import build_engine, create_schema, drop_schema


@pytest.fixture(scope="session")
def _postgres_url():
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:15-alpine") as pg:
        # testcontainers hands out a psycopg2 URL; the async engine wants psycopg (v3)
        yield pg.get_connection_url().replace("psycopg2", "psycopg")


@pytest.fixture()
async def db_engine(_postgres_url):
    """Overrides the SQLite engine: same fixtures, real Postgres underneath."""
    engine = build_engine(_postgres_url)
    await create_schema(engine)
    try:
        yield engine
    finally:
        await drop_schema(engine)
        await engine.dispose()
