"""Async SQLAlchemy engine, session and schema helpers."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import MetaData, event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import ServiceSettings

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./storefront.db"

_engines: dict[str, AsyncEngine] = {}
_session_factories: dict[str, async_sessionmaker[AsyncSession]] = {}


def _enforce_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Return the engine cached for ``database_url``, creating it on first use.

    SQLite connections get ``PRAGMA foreign_keys=ON`` so order and cart line
    rows follow their parent's ``ON DELETE CASCADE``.
    """

    engine = _engines.get(database_url)
    if engine is not None:
        return engine

    engine = create_async_engine(database_url, pool_pre_ping=True, **kwargs)
    if make_url(database_url).get_backend_name() == "sqlite":
        event.listen(engine.sync_engine, "connect", _enforce_sqlite_foreign_keys)
    _engines[database_url] = engine
    return engine


def get_session_factory(database_url: str, *, echo: bool = False) -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the cached engine for ``database_url``."""

    factory = _session_factories.get(database_url)
    if factory is None:
        factory = async_sessionmaker(create_engine(database_url, echo=echo), expire_on_commit=False)
        _session_factories[database_url] = factory
    return factory


@asynccontextmanager
async def lifespan_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Request-scoped session: commit whatever is pending on success, roll back on error."""

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def resolve_database_url(settings: ServiceSettings, fallback: str = DEFAULT_DATABASE_URL) -> str:
    return settings.database_url or fallback


async def create_schema(database_url: str, metadata: MetaData) -> None:
    """Create missing tables; existing tables are left untouched."""

    async with create_engine(database_url).begin() as conn:
        await conn.run_sync(metadata.create_all)


async def dispose_engines() -> None:
    """Close pooled connections of every cached engine and forget them."""

    for engine in _engines.values():
        await engine.dispose()
    _engines.clear()
    _session_factories.clear()
