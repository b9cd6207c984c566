"""SQLAlchemy async engine & session factory for the relational storage backend."""

from __future__ import annotations

import logging

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from netdrive.config import settings
from netdrive.models.base import Base

logger = logging.getLogger(__name__)

engine: AsyncEngine | None = None
async_session: async_sessionmaker[AsyncSession] | None = None


def _configure_sqlite(dbapi_conn, _connection_record):
    """Apply SQLite PRAGMAs: WAL keeps readers off the writer's lock."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async engine; SQLite URLs get the PRAGMA listener."""
    new_engine = create_async_engine(
        database_url,
        echo=settings.debug and settings.log_level == "DEBUG",
    )
    if make_url(database_url).get_backend_name() == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _configure_sqlite)
    return new_engine


def configure(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Bind the module-level engine and session factory to ``database_url``."""
    global engine, async_session
    if not database_url:
        raise RuntimeError(
            "NETDRIVE_DATABASE_URL is required when storage_backend is 'database'"
        )
    engine = create_engine(database_url)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return async_session


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create all tables (dev/first-run)."""
    target = target or engine
    if target is None:
        raise RuntimeError("Database engine not configured — call configure() first")
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created/verified at %s", target.url.render_as_string(hide_password=True))


async def dispose() -> None:
    global engine, async_session
    if engine is not None:
        await engine.dispose()
    engine = None
    async_session = None
