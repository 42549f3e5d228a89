"""
Test infrastructure for the articles repository layer.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces every connection checkout to share the same in-memory
  database connection, which is required because SQLite in-memory databases
  are connection-scoped; a new connection would see an empty database.
- A fresh engine is built for each test and the schema is created from
  ``Base.metadata``, giving each test a clean isolated state.
- A query counter is installed on the test engine so tests can assert that
  rejected calls never reach the database.
"""
import uuid

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers the articles table on Base.metadata)
from app.database import Base
from app.instrumentation import QueryCounter, install_query_counter
from app.repositories import Article, RequestContext, Store

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ARTICLE_ID = uuid.UUID("72bc87f3-4a9f-4d05-93fe-844d3cd94c65")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine_test() -> AsyncEngine:
    """Create all tables on a fresh in-memory engine, drop and dispose after."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def query_counter(engine_test: AsyncEngine) -> QueryCounter:
    return install_query_counter(engine_test)


@pytest_asyncio.fixture
async def store(engine_test: AsyncEngine) -> Store:
    """A store whose statements were prepared against the test engine."""
    return await Store.open(engine_test)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext()


@pytest.fixture
def article() -> Article:
    return Article(id=ARTICLE_ID, name="Foobar")
