"""Connection pool, session factory and the transaction scope.

One async engine per process, built on first use from
:func:`survey_db.config.get_async_url`.  Callers never commit themselves:
they open a :func:`session_scope`, and the scope commits when the block
exits cleanly or rolls back when it raises.

    async with session_scope() as db:
        await service.record_item(db, response_id, "q1", 4)

``dispose_engine()`` releases the pool on shutdown; the next call to
``get_engine()`` builds a fresh one.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from survey_db.config import get_async_url

logger = logging.getLogger(__name__)

# Pool sizing: PG_POOL_SIZE / PG_MAX_OVERFLOW.  PG_ECHO=1 logs every statement.
_POOL_SIZE = int(os.getenv("PG_POOL_SIZE", "5"))
_MAX_OVERFLOW = int(os.getenv("PG_MAX_OVERFLOW", "10"))
_ECHO = os.getenv("PG_ECHO", "0") == "1"

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """The process-wide async engine, created on first call."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            get_async_url(),
            echo=_ECHO,
            pool_size=_POOL_SIZE,
            max_overflow=_MAX_OVERFLOW,
            # Responses trickle in over minutes; drop connections the server closed
            pool_pre_ping=True,
        )
        logger.info("Database engine created (pool_size=%d)", _POOL_SIZE)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on clean exit, roll back and re-raise otherwise."""
    factory = factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping_database() -> None:
    """Run ``SELECT 1``; raises if the database is unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None
