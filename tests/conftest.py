import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from catalog.cache import ResponseCache
from catalog.db.session import Base, get_db, get_sessionmaker
from catalog.main import app
from catalog.repositories import product as product_repo
from tests.fakes import FakeProductRepository, no_session

# Fixtures in other modules are only visible when registered here.
pytest_plugins = ["tests.seeds"]

# Separate Postgres database for tests. Database-backed tests are skipped when
# it can't be reached.
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL", "postgresql+asyncpg://catalog@localhost:5432/catalog_test"
)

engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
async_session = async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture(autouse=True)
def response_cache() -> ResponseCache:
    """Give every test an empty cache."""
    cache = ResponseCache()
    app.state.response_cache = cache
    return cache


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """Create tables and yield a session, then drop tables after test."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"test database unavailable: {exc}")

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncIterator[AsyncClient]:
    """HTTP client backed by the test database."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sessionmaker] = lambda: async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def fake_repo(monkeypatch: pytest.MonkeyPatch) -> FakeProductRepository:
    """In-memory stand-in for repositories/product.py."""
    fake = FakeProductRepository()
    for name in (
        "list_products",
        "count_products",
        "get_product",
        "create_product",
        "update_product",
        "delete_product",
    ):
        monkeypatch.setattr(product_repo, name, getattr(fake, name))
    return fake


@pytest_asyncio.fixture
async def api(fake_repo: FakeProductRepository) -> AsyncIterator[AsyncClient]:
    """HTTP client over the fake repository; no database involved.

    App exceptions are turned into responses so 500s can be asserted on.
    """

    async def override_get_db() -> AsyncIterator[None]:
        yield None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sessionmaker] = lambda: no_session

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
