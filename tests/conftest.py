from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from advanced_alchemy.base import UUIDAuditBase
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from quotakeeper.config.base import QuotaSettings
from quotakeeper.db import models as m

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable
    from pathlib import Path


@pytest.fixture()
def anyio_backend() -> str:
    # the code under test is asyncio-only (asyncio.gather, aiosqlite)
    return "asyncio"


@pytest.fixture()
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    # file backed so that concurrent sessions share one database
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'quota.sqlite3'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(UUIDAuditBase.registry.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def quota_settings() -> QuotaSettings:
    return QuotaSettings()


@pytest.fixture()
def seed_users(session: AsyncSession) -> Callable[..., Awaitable[list[m.User]]]:
    """Insert ``count`` accounts sharing the given column values and commit them."""

    async def _seed(count: int, **values: Any) -> list[m.User]:
        users = [m.User(**values) for _ in range(count)]
        session.add_all(users)
        await session.commit()
        return users

    return _seed
