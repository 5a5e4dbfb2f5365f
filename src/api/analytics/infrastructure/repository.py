"""SQLAlchemy implementation of the analytics repository.

Reads the tables owned by the projection context. This module only
selects; it never mutates the read model.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from analytics.domain.value_objects import (
    CatalogProduct,
    CategoryMetrics,
    CustomerLifetimeValue,
    HourlySales,
    ProductSales,
)
from projection.infrastructure.models import (
    SYNC_STATUS_ID,
    CategoryMetricsModel,
    CustomerLifetimeValueModel,
    HourlySalesModel,
    ProductCatalogModel,
    ProductSalesModel,
    SyncStatusModel,
)


class SqlAnalyticsRepository:
    """Read-only view queries on a read-database session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_product_sales(self, product_id: int) -> ProductSales | None:
        row = await self._session.get(ProductSalesModel, product_id)
        if row is None:
            return None
        return ProductSales(
            product_id=row.product_id,
            total_quantity_sold=row.total_quantity_sold,
            total_revenue=row.total_revenue,
            order_count=row.order_count,
        )

    async def get_category_metrics(self, category: str) -> CategoryMetrics | None:
        stmt = (
            select(CategoryMetricsModel)
            .where(func.lower(CategoryMetricsModel.category_name) == category.lower())
            .order_by(CategoryMetricsModel.category_name)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return CategoryMetrics(
            category=row.category_name,
            total_revenue=row.total_revenue,
            total_orders=row.total_orders,
        )

    async def get_customer_lifetime_value(
        self, customer_id: str
    ) -> CustomerLifetimeValue | None:
        row = await self._session.get(CustomerLifetimeValueModel, customer_id)
        if row is None:
            return None
        return CustomerLifetimeValue(
            customer_id=row.customer_id,
            total_spent=row.total_spent,
            order_count=row.order_count,
            last_order_date=_as_utc(row.last_order_date),
        )

    async def get_hourly_sales(self, hour: datetime) -> HourlySales | None:
        stmt = select(HourlySalesModel).where(HourlySalesModel.hour_timestamp == hour)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return HourlySales(
            hour=_as_utc(row.hour_timestamp),
            total_orders=row.total_orders,
            total_revenue=row.total_revenue,
        )

    async def get_product(self, product_id: int) -> CatalogProduct | None:
        row = await self._session.get(ProductCatalogModel, product_id)
        if row is None:
            return None
        return CatalogProduct(
            product_id=row.product_id,
            name=row.name,
            category=row.category,
            price=row.price,
            stock=row.stock,
            updated_at=_as_utc(row.updated_at),
        )

    async def get_last_processed_event_timestamp(self) -> datetime | None:
        row = await self._session.get(SyncStatusModel, SYNC_STATUS_ID)
        if row is None:
            return None
        return _as_utc(row.last_processed_event_timestamp)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes; all stored values are UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
