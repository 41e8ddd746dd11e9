from __future__ import annotations

"""
Asynchronous Database Utilities Module

Async SQLAlchemy engine and session helpers for the `users` table the
confirmation services work on.

Key Components:
    - build_engine: Creates the async engine from settings.DATABASE_URL.
    - get_session_factory: Lazily built factory for async sessions.
    - get_async_db: A context manager yielding an async session.
    - create_async_db_and_tables: Utility to create tables (tests, local runs).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from phone_confirmable.core.config.settings import settings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(url: Optional[str] = None) -> AsyncEngine:
    """
    Create an async engine for ``url`` (defaults to settings.DATABASE_URL).

    **Security Note**: the URL carries credentials; it is never logged.
    """
    return create_async_engine(
        url or settings.DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _engine, _session_factory
    if _session_factory is None:
        _engine = build_engine()
        _session_factory = async_sessionmaker(bind=_engine, expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession, rolling back on error and always closing it.
    """
    async with get_session_factory()() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            await session.close()
            logger.debug("Async database session closed")


async def create_async_db_and_tables(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create tables using the async engine (mainly for local runs).
    """
    engine = engine or build_engine()
    logger.info("Creating async database tables")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")
