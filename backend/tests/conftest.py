"""Shared fixtures: a throwaway database and helpers to seed it."""
from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sitewatch import crud
from sitewatch import models  # noqa: F401
from sitewatch.database import Base, configure_sqlite_connection
from tests.helpers import RecordingNotifier


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database with all tables.

    A file rather than :memory: so concurrent checks each get their own
    connection, as they do in production.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sitewatch-test.db'}")
    event.listen(engine.sync_engine, "connect", configure_sqlite_connection)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def make_target(session_factory):
    """Create a committed target and return it."""

    async def _make(
        url: str = "https://example.com/",
        owner_id: str = "owner-1",
        interval_seconds: int = 60,
        last_checked_at: Optional[datetime] = None,
    ):
        async with session_factory() as session:
            target = await crud.create_target(session, owner_id, url, interval_seconds)
            target.last_checked_at = last_checked_at
            await session.commit()
            return target

    return _make


@pytest.fixture
def load_target(session_factory):
    """Read a target back from the database."""

    async def _load(target_id: int):
        async with session_factory() as session:
            return await crud.get_target(session, target_id)

    return _load


@pytest.fixture
def load_records(session_factory):
    """All history records of a target, oldest first."""

    async def _load(target_id: int):
        async with session_factory() as session:
            return await crud.get_records_in_range(session, target_id, since=datetime(1970, 1, 1))

    return _load


@pytest.fixture
def notifier():
    return RecordingNotifier()
