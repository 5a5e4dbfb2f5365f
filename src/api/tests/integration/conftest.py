"""Integration test fixtures.

These fixtures require running PostgreSQL and RabbitMQ instances. Use
docker-compose for testing. Connection details come from the same
ORDERVIEW_* environment variables the application reads.
"""

from collections.abc import AsyncIterator

import aio_pika
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Registers the tables on their metadata
import infrastructure.outbox.models  # noqa: F401
import projection.infrastructure.models  # noqa: F401
from infrastructure.database.engines import create_read_engine, create_write_engine
from infrastructure.database.models import Base, ReadModelBase
from infrastructure.settings import (
    BrokerSettings,
    DatabaseSettings,
    ReadDatabaseSettings,
)
from shared_kernel.events.serialization import ORDER_EVENTS_TOPIC, PRODUCT_EVENTS_TOPIC


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database and broker)",
    )


@pytest.fixture(scope="session")
def broker_settings() -> BrokerSettings:
    return BrokerSettings()


@pytest_asyncio.fixture
async def write_engine() -> AsyncIterator[AsyncEngine]:
    """Write database with a freshly created outbox table."""
    engine = create_write_engine(DatabaseSettings())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def read_engine() -> AsyncIterator[AsyncEngine]:
    """Read database with freshly created view tables."""
    engine = create_read_engine(ReadDatabaseSettings())
    async with engine.begin() as conn:
        await conn.run_sync(ReadModelBase.metadata.drop_all)
        await conn.run_sync(ReadModelBase.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def write_sessionmaker(write_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(write_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
def read_sessionmaker(read_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(read_engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def purged_queues(broker_settings: BrokerSettings) -> list[str]:
    """Declare the event queues and drop anything left by earlier runs."""
    queues = [ORDER_EVENTS_TOPIC, PRODUCT_EVENTS_TOPIC]
    connection = await aio_pika.connect(broker_settings.url.get_secret_value())
    async with connection:
        channel = await connection.channel()
        for name in queues:
            queue = await channel.declare_queue(name, durable=True)
            await queue.purge()
    return queues
