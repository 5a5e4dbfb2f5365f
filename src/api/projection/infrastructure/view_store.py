"""SQL implementation of the view store.

Every aggregate update is one ``INSERT ... ON CONFLICT DO UPDATE``
statement, so the read-modify-write of a row is atomic in the database
and concurrent projectors cannot lose each other's increments. The
statements are built for PostgreSQL in production and SQLite in tests.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import case, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projection.domain.value_objects import (
    CatalogEntry,
    CategoryContribution,
    CustomerContribution,
    HourlyContribution,
    PriceUpdate,
    ProductSalesContribution,
)
from projection.infrastructure.models import (
    SYNC_STATUS_ID,
    CategoryMetricsModel,
    CustomerLifetimeValueModel,
    HourlySalesModel,
    ProcessedEventModel,
    ProductCatalogModel,
    ProductSalesModel,
    SyncStatusModel,
)


class SqlViewStore:
    """View store bound to one session and its open transaction.

    Never commits; the unit of work that created it owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def is_processed(self, event_id: str) -> bool:
        stmt = select(ProcessedEventModel.event_id).where(
            ProcessedEventModel.event_id == event_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def record_processed(self, event_id: str) -> None:
        # Plain insert: a concurrent duplicate must fail and roll back
        self._session.add(
            ProcessedEventModel(event_id=event_id, processed_at=datetime.now(UTC))
        )
        await self._session.flush()

    async def add_product_sales(self, contribution: ProductSalesContribution) -> None:
        table = ProductSalesModel.__table__
        stmt = self._insert(table).values(
            product_id=contribution.product_id,
            total_quantity_sold=contribution.quantity,
            total_revenue=contribution.revenue,
            order_count=contribution.orders,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.product_id],
            set_={
                "total_quantity_sold": table.c.total_quantity_sold
                + stmt.excluded.total_quantity_sold,
                "total_revenue": table.c.total_revenue + stmt.excluded.total_revenue,
                "order_count": table.c.order_count + stmt.excluded.order_count,
            },
        )
        await self._session.execute(stmt)

    async def add_category_metrics(self, contribution: CategoryContribution) -> None:
        table = CategoryMetricsModel.__table__
        stmt = self._insert(table).values(
            category_name=contribution.category,
            total_revenue=contribution.revenue,
            total_orders=contribution.orders,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.category_name],
            set_={
                "total_revenue": table.c.total_revenue + stmt.excluded.total_revenue,
                "total_orders": table.c.total_orders + stmt.excluded.total_orders,
            },
        )
        await self._session.execute(stmt)

    async def add_customer_value(self, contribution: CustomerContribution) -> None:
        table = CustomerLifetimeValueModel.__table__
        stmt = self._insert(table).values(
            customer_id=contribution.customer_id,
            total_spent=contribution.spent,
            order_count=contribution.orders,
            last_order_date=_to_utc(contribution.order_at),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.customer_id],
            set_={
                "total_spent": table.c.total_spent + stmt.excluded.total_spent,
                "order_count": table.c.order_count + stmt.excluded.order_count,
                "last_order_date": stmt.excluded.last_order_date,
            },
        )
        await self._session.execute(stmt)

    async def add_hourly_sales(self, contribution: HourlyContribution) -> None:
        table = HourlySalesModel.__table__
        stmt = self._insert(table).values(
            hour_timestamp=_to_utc(contribution.hour),
            total_orders=contribution.orders,
            total_revenue=contribution.revenue,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.hour_timestamp],
            set_={
                "total_orders": table.c.total_orders + stmt.excluded.total_orders,
                "total_revenue": table.c.total_revenue + stmt.excluded.total_revenue,
            },
        )
        await self._session.execute(stmt)

    async def upsert_catalog_entry(self, entry: CatalogEntry) -> None:
        table = ProductCatalogModel.__table__
        stmt = self._insert(table).values(
            product_id=entry.product_id,
            name=entry.name,
            category=entry.category,
            price=entry.price,
            stock=entry.stock,
            updated_at=_to_utc(entry.updated_at),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.product_id],
            set_={
                "name": stmt.excluded.name,
                "category": stmt.excluded.category,
                "price": stmt.excluded.price,
                "stock": stmt.excluded.stock,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)

    async def update_catalog_price(self, update: PriceUpdate) -> None:
        table = ProductCatalogModel.__table__
        stmt = self._insert(table).values(
            product_id=update.product_id,
            price=update.price,
            updated_at=_to_utc(update.updated_at),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.product_id],
            set_={
                "price": stmt.excluded.price,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)

    async def set_sync_status(self, timestamp: datetime, monotonic: bool = False) -> None:
        table = SyncStatusModel.__table__
        stmt = self._insert(table).values(
            id=SYNC_STATUS_ID,
            last_processed_event_timestamp=_to_utc(timestamp),
        )

        current = table.c.last_processed_event_timestamp
        incoming = stmt.excluded.last_processed_event_timestamp
        if monotonic:
            value: Any = case(
                (or_(current.is_(None), current < incoming), incoming),
                else_=current,
            )
        else:
            value = incoming

        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={"last_processed_event_timestamp": value},
        )
        await self._session.execute(stmt)

    def _insert(self, table: Any) -> Any:
        dialect = self._session.bind.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise NotImplementedError(f"Upserts are not supported for dialect {dialect!r}")


class SqlViewUnitOfWork:
    """Opens one read-model session and transaction per event."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the unit of work.

        Args:
            session_factory: Factory for creating read database sessions
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqlViewStore]:
        async with self._session_factory() as session:
            async with session.begin():
                yield SqlViewStore(session)


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
