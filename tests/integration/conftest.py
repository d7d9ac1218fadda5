from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from litestar.testing import AsyncTestClient

from quotakeeper.asgi import create_app
from quotakeeper.config.app import alchemy
from quotakeeper.domain.accounts.guards import auth
from quotakeeper.domain.resets import deps

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from litestar import Litestar
    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture()
def app(engine: AsyncEngine, monkeypatch: pytest.MonkeyPatch) -> Litestar:
    monkeypatch.setattr(alchemy, "engine_instance", engine)
    monkeypatch.setattr(alchemy, "session_maker", None)
    deps._session_maker.cache_clear()
    yield create_app()
    deps._session_maker.cache_clear()


@pytest.fixture()
async def client(app: Litestar) -> AsyncGenerator[AsyncTestClient, None]:
    async with AsyncTestClient(app=app) as client:
        yield client


@pytest.fixture()
def admin_token_headers() -> dict[str, str]:
    token = auth.create_token(identifier="ops@example.com", token_extras={"admin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def service_token_headers() -> dict[str, str]:
    token = auth.create_token(identifier="analysis-service")
    return {"Authorization": f"Bearer {token}"}
