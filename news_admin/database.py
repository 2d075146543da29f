"""Database engine and session management.

The ingester owns the database; this service opens it for reading. Tables
are only created here for local development (``settings.create_tables``).
"""

from collections.abc import AsyncGenerator
from functools import lru_cache
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.config import get_settings


def _async_url(db_url: str) -> str:
    """Swap a plain ``sqlite://`` URL for the aiosqlite driver."""
    if db_url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + db_url[len("sqlite://"):]
    return db_url


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """Set SQLite pragmas for reading alongside the ingester."""
    cursor = dbapi_connection.cursor()
    # WAL lets the ingester write while we read
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=60000")
    cursor.close()


@lru_cache
def get_engine() -> AsyncEngine:
    """Get cached async engine instance."""
    settings = get_settings()
    db_url = _async_url(settings.database_url)

    if db_url.startswith("sqlite"):
        engine = create_async_engine(db_url, echo=settings.debug, connect_args={"timeout": 60})
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
        return engine

    return create_async_engine(db_url, echo=settings.debug, pool_pre_ping=True)


async def init_db() -> None:
    """Create tables for local development."""
    # Import models so they are registered on the metadata
    from news_admin import models  # noqa: F401

    engine = get_engine()
    database = engine.url.database
    if engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides an async database session."""
    async with async_session_maker() as session:
        yield session


def async_session_maker(engine: AsyncEngine | None = None) -> AsyncSession:
    """
    Open a session outside of FastAPI dependencies.

    Usage:
        async with async_session_maker() as session:
            ...
    """
    factory = async_sessionmaker(engine or get_engine(), class_=AsyncSession, expire_on_commit=False)
    return factory()
