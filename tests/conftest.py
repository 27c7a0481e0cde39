"""
Shared pytest fixtures.

Integration fixtures run against a throwaway SQLite database with the
chain boundary replaced by in-process fakes. Redis is disabled, so the
in-memory challenge and rate-limit stores are used.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from glaneur.config.settings import Settings, override_settings, reset_settings
from glaneur.di.container import get_container, reset_container
from glaneur.infrastructure.persistence.database import Database
from tests.helpers.fakes import FakeChainClient, FakeMintBuilder


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Test settings with a per-test SQLite file."""
    test_settings = Settings(
        ENV="test",
        LOG_LEVEL="WARNING",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'glaneur_test.db'}",
        JWT_SECRET_KEY="test-secret-key",
        SOLANA_RPC_URL="http://localhost:8899",
        REDIS_ENABLED=False,
        RECONCILIATION_ENABLED=False,
        METRICS_ENABLED=True,
        SIWS_DOMAIN="glaneur.test",
        CHALLENGE_TTL_SECONDS=300,
        COLLECT_USER_DAILY_LIMIT=10,
        COLLECT_IP_DAILY_LIMIT=30,
        COLLECT_BURST_LIMIT=2,
    )
    override_settings(test_settings)
    yield test_settings
    reset_settings()


@pytest.fixture
async def database(settings):
    """Connected database with all tables created."""
    db = Database(database_url=settings.DATABASE_URL, echo=False)
    await db.connect()
    await db.create_tables()
    yield db
    await db.disconnect()


@pytest.fixture
def chain_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def mint_builder() -> FakeMintBuilder:
    return FakeMintBuilder()


@pytest.fixture
async def container(settings, database, chain_client, mint_builder):
    """Global DI container wired to the test database and fakes."""
    reset_container()
    test_container = get_container()
    test_container._database = database
    test_container._chain_client = chain_client
    test_container._mint_builder = mint_builder
    yield test_container
    if test_container._reconciliation_sweeper:
        await test_container._reconciliation_sweeper.stop()
    reset_container()


@pytest.fixture
async def client(settings, container):
    """HTTP client bound to the ASGI app (lifespan is not run)."""
    from glaneur.main import create_app

    app = create_app(settings)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
