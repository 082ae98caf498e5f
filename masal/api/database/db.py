"""PostgreSQL connection management.

SQLAlchemy async owns the schema (create_all at startup); queries run as
raw SQL over a process-wide asyncpg pool.
"""

from typing import Optional

import asyncpg
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..config import DATABASE_URL, DB_POOL_MAX_SIZE, DB_POOL_MIN_SIZE


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


def sqlalchemy_url(url: str) -> str:
    """Normalize a connection string for SQLAlchemy's asyncpg dialect."""
    if url.startswith("postgresql+asyncpg://"):
        return url
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def asyncpg_dsn(url: str) -> str:
    """Normalize a connection string for asyncpg.connect/create_pool."""
    return url.replace("postgresql+asyncpg://", "postgresql://", 1)


# Create async engine (only if DATABASE_URL is configured)
engine: Optional[AsyncEngine] = None

if DATABASE_URL:
    engine = create_async_engine(
        sqlalchemy_url(DATABASE_URL),
        echo=False,  # Set to True for SQL debugging
        pool_pre_ping=True,
    )

# Global asyncpg pool (set during API startup)
_pool: Optional[asyncpg.Pool] = None


def _check_configured():
    """Raise an error if the database is not configured."""
    if engine is None:
        raise RuntimeError(
            "Database not configured. Set DATABASE_URL environment variable "
            "to a PostgreSQL connection string."
        )


async def init_db() -> None:
    """Initialize database - create all tables."""
    _check_configured()
    # Import models so they register on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_pool(url: str = DATABASE_URL) -> asyncpg.Pool:
    """Create the asyncpg pool and register it globally."""
    pool = await asyncpg.create_pool(
        asyncpg_dsn(url),
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
    )
    set_pool(pool)
    return pool


def set_pool(pool: Optional[asyncpg.Pool]) -> None:
    """Set the asyncpg pool. Called during API startup."""
    global _pool
    _pool = pool


def get_pool() -> asyncpg.Pool:
    """Get the asyncpg pool. Raises if not initialized."""
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Is DATABASE_URL set?")
    return _pool


def has_pool() -> bool:
    return _pool is not None


async def close_pool() -> None:
    """Close the asyncpg pool. Called during API shutdown."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
