"""
Database engine and sessions for the ledger.

A request gets one session. Services only flush; the router or ``get_db``
commits, and any exception rolls the request back. Distribution commits and cascade deletes commit on
their own and leave the session clean for ``get_db``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from cvm_capital.config import settings

logger = logging.getLogger(__name__)

# NullPool keeps the app friendly to transaction poolers (pgbouncer, Supabase)
engine = create_async_engine(
    settings.database_url,
    poolclass=NullPool,
    echo=not settings.is_production,
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session, committed when the endpoint returns.

    Usage:
        @router.post("/requests/{request_id}/approve")
        async def approve(request_id: int, db: AsyncSession = Depends(get_db)):
            request = await approvals.approve_request(db, request_id, ...)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Session outside a request: startup bootstrap and the seed script.

    Usage:
        async with get_db_context() as db:
            await ensure_initial_data(db)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
