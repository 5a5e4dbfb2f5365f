"""Unit test fixtures.

Database-backed unit tests run against in-memory SQLite through aiosqlite.
The write metadata (outbox) and the read-model metadata (views, ledger,
sync status) get separate engines, mirroring the two production databases.
"""

from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Registers the tables on their metadata
import infrastructure.outbox.models  # noqa: F401
import projection.infrastructure.models  # noqa: F401
from infrastructure.database.models import Base, ReadModelBase
from shared_kernel.events import LineItem, OrderCreated

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


async def _create_engine(metadata: MetaData) -> AsyncEngine:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    return engine


@pytest_asyncio.fixture
async def write_engine() -> AsyncIterator[AsyncEngine]:
    """In-memory write database holding the outbox table."""
    engine = await _create_engine(Base.metadata)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def read_engine() -> AsyncIterator[AsyncEngine]:
    """In-memory read database holding the views."""
    engine = await _create_engine(ReadModelBase.metadata)
    yield engine
    await engine.dispose()


@pytest.fixture
def write_sessionmaker(write_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(write_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
def read_sessionmaker(read_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(read_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
def make_order() -> Callable[..., OrderCreated]:
    """Factory for OrderCreated events with sensible defaults.

    The defaults describe a single-line order of two books at 10.00 placed
    by customer c1 on 2024-01-01 at 10:15 UTC.
    """

    def _make(
        event_id: str = "e1",
        customer_id: str = "c1",
        items: tuple[LineItem, ...] | None = None,
        total: Decimal | None = None,
        timestamp: datetime = datetime(2024, 1, 1, 10, 15, tzinfo=UTC),
        order_id: int | None = 1,
    ) -> OrderCreated:
        if items is None:
            items = (
                LineItem(product_id=1, quantity=2, price=Decimal("10"), category="Books"),
            )
        if total is None:
            total = sum((item.revenue for item in items), Decimal("0"))
        return OrderCreated(
            event_id=event_id,
            order_id=order_id,
            customer_id=customer_id,
            items=items,
            total=total,
            timestamp=timestamp,
        )

    return _make
