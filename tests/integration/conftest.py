from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

import incentive_ledger.db.models  # noqa: F401
from incentive_ledger.db.models.base import Base
from incentive_ledger.db.session import build_sessionmaker
from incentive_ledger.economy.points import locks


@pytest.fixture(autouse=True)
async def ledger_db(tmp_path, monkeypatch):
    # One throwaway SQLite file per test; NullPool keeps no connection across event loops.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'incentive_ledger.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    monkeypatch.setattr(locks, "SessionLocal", build_sessionmaker(engine))

    yield engine

    await engine.dispose()
