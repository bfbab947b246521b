import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from infrastructure import db
from infrastructure.metrics import metrics


@pytest.fixture
def sqlite_dsn(tmp_path):
    """File-backed SQLite so every connection sees the same database."""
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest_asyncio.fixture
async def db_engine(sqlite_dsn):
    """Create a fresh schema for each test."""
    engine = create_async_engine(sqlite_dsn, future=True, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(db.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()
