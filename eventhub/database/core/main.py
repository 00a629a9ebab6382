# eventhub/database/core/main.py
from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from eventhub.common.settings import Settings, get_settings

_settings = get_settings()

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    # Set a default schema to keep DDL explicit and consistent
    metadata = MetaData(
        schema=_settings.db_schema,
        naming_convention=NAMING_CONVENTION,
    )


def build_engine(url: Optional[str] = None, settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Async engine for the configured database. In-memory SQLite shares one
    connection (StaticPool) so every session sees the same tables.
    """
    cfg = settings or get_settings()
    url = url or cfg.database_url
    kw: dict[str, Any] = {"echo": cfg.db.echo}
    if url.startswith("sqlite"):
        if ":memory:" in url:
            kw["poolclass"] = StaticPool
    else:
        kw.update(
            pool_size=cfg.db.pool_size,
            max_overflow=cfg.db.max_overflow,
            pool_pre_ping=cfg.db.pool_pre_ping,
            pool_recycle=cfg.db.pool_recycle,
        )
    engine = create_async_engine(url, **kw)

    # Ensure the app schema is first, then public (so extensions remain visible)
    schema = Base.metadata.schema
    if schema and not url.startswith("sqlite"):
        from sqlalchemy import event

        @event.listens_for(engine.sync_engine, "connect")
        def _set_search_path(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            try:
                cur.execute(f'SET search_path TO "{schema}", public')
            finally:
                cur.close()

    return engine


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return build_engine()


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables from the models (development and tests)."""
    import eventhub.database.models  # noqa: F401  (registers tables on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    import eventhub.database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
