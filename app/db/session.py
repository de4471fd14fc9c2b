"""
Database session management.

This module provides utilities for creating and managing database sessions
using async SQLAlchemy with PostgreSQL (SQLite for local testing).
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import DatabaseSettings, settings
from app.core.logging import logger
from app.models.base import Base


def build_engine(database: DatabaseSettings, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the configured database.

    SQLite in-memory databases live inside a single connection, so they get
    a static pool instead of the sized pool used for Postgres.
    """
    options: Dict[str, Any] = {"echo": echo, "future": True}
    if database.is_sqlite:
        options.update(
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        options.update(
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_pre_ping=True,
            pool_recycle=database.pool_recycle,
        )
    return create_async_engine(database.url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Create async engine
engine = build_engine(settings.database, echo=settings.debug)

# Create async session factory
AsyncSessionLocal = build_session_factory(engine)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create any missing tables."""
    import app.models  # noqa: F401  registers the mapped classes

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    This function is used as a dependency in FastAPI endpoints to provide
    a database session. It ensures the session is properly closed after use.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()
