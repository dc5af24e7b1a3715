"""Integration-test fixtures.

These tests need PostgreSQL + Redis with migrations applied
(alembic upgrade head) and run only when PM_INTEGRATION=1.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.main import app

WALLET = "0x00000000000000000000000000000000000a11ce"
OTHER_WALLET = "0x0000000000000000000000000000000000000b0b"


def pytest_collection_modifyitems(config, items):  # type: ignore[no-untyped-def]
    if os.environ.get("PM_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set PM_INTEGRATION=1 with Postgres + Redis running")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def fast_transactions() -> None:
    """Keep simulated confirmations short so drain() returns quickly."""
    settings.TX_MIN_DELAY_SECONDS = 0.0
    settings.TX_MAX_DELAY_SECONDS = 0.05
    settings.TX_FAILURE_RATE = 0.0


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _connect(client: AsyncClient, address: str) -> dict[str, str]:
    resp = await client.post("/api/v1/wallet/connect", json={"address": address, "chain_id": "0x1"})
    return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def alice(client: AsyncClient) -> dict[str, str]:
    return await _connect(client, WALLET)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def bob(client: AsyncClient) -> dict[str, str]:
    return await _connect(client, OTHER_WALLET)
