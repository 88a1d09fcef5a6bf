"""
SQLAlchemy async database client for the calendar reminder worker.

Provides async connection management using SQLAlchemy Core. PostgreSQL
(asyncpg) and SQLite (aiosqlite) URLs are both accepted.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import Table
from sqlalchemy.engine import make_url
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .config import get_database_url, is_sql_echo
from .tables import metadata

# Module-level engine (created on first use)
_engine: AsyncEngine | None = None


def _get_async_database_url() -> str:
    """
    Normalize the configured URL to an async driver.

    postgresql:// becomes postgresql+asyncpg://, sqlite:// becomes
    sqlite+aiosqlite://. URLs that already name a driver are left alone.
    """
    database_url = get_database_url()

    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return database_url


def get_engine() -> AsyncEngine:
    """Get or create the async SQLAlchemy engine singleton."""
    global _engine
    if _engine is None:
        database_url = _get_async_database_url()
        if database_url.startswith("sqlite"):
            db_path = make_url(database_url).database
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            _engine = create_async_engine(database_url, echo=is_sql_echo())
        else:
            _engine = create_async_engine(
                database_url,
                echo=is_sql_echo(),
                pool_size=5,
                max_overflow=10,
                pool_timeout=30,
                pool_recycle=1800,  # Recycle connections every 30 minutes
            )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Get an async database connection from the pool.

    Usage:
        async with get_connection() as conn:
            result = await conn.execute(select(users))
            row = result.mappings().first()
    """
    engine = get_engine()
    async with engine.connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """
    Get an async database connection with automatic transaction management.
    Commits on success, rolls back on exception.
    """
    engine = get_engine()
    async with engine.begin() as conn:
        yield conn


def dialect_insert(conn: AsyncConnection, table: Table):
    """
    Build an INSERT for the connection's dialect.

    The dialect-specific constructs expose on_conflict_do_nothing() and
    on_conflict_do_update(), which the generic insert() lacks.
    """
    if conn.dialect.name == "postgresql":
        return postgresql.insert(table)
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise ValueError(f"Unsupported database dialect: {conn.dialect.name}")


async def create_tables() -> None:
    """Create missing tables. Development and test helper only."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def close_engine() -> None:
    """Close the engine and all connections. Call on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
