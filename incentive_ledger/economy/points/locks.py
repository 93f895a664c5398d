from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from incentive_ledger.db.session import SessionLocal
from incentive_ledger.economy.errors import LedgerStorageError

logger = structlog.get_logger(__name__)

_USER_LOCKS: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()


def _lock_for_user(user_id: int) -> asyncio.Lock:
    lock = _USER_LOCKS.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _USER_LOCKS[user_id] = lock
    return lock


@asynccontextmanager
async def user_ledger_section(user_id: int) -> AsyncIterator[None]:
    lock = _lock_for_user(user_id)
    async with lock:
        yield


@asynccontextmanager
async def ledger_session(
    session_factory: async_sessionmaker | None = None,
) -> AsyncIterator[AsyncSession]:
    factory = session_factory or SessionLocal
    try:
        async with factory.begin() as session:
            yield session
    except SQLAlchemyError as exc:
        logger.exception("ledger_storage_failure", error_type=type(exc).__name__)
        raise LedgerStorageError(str(exc)) from exc


@asynccontextmanager
async def locked_user_session(
    user_id: int,
    session_factory: async_sessionmaker | None = None,
) -> AsyncIterator[AsyncSession]:
    """One transaction per call, serialized per user in-process and by row lock across processes."""
    async with user_ledger_section(user_id):
        async with ledger_session(session_factory) as session:
            yield session
