"""SQLAlchemy ORM models for the read-model materialized views.

All tables live in the read database and are written only by the
projector. Money columns are NUMERIC(14, 2); timestamps are stored in UTC.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import ReadModelBase, utc_now

SYNC_STATUS_ID = 1

Money = Numeric(14, 2)


class ProductSalesModel(ReadModelBase):
    """Sales aggregates per product."""

    __tablename__ = "product_sales_view"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    total_quantity_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CategoryMetricsModel(ReadModelBase):
    """Revenue and order count per product category."""

    __tablename__ = "category_metrics_view"

    category_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    total_revenue: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    total_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CustomerLifetimeValueModel(ReadModelBase):
    """Lifetime spend per customer."""

    __tablename__ = "customer_ltv_view"

    customer_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    total_spent: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_order_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class HourlySalesModel(ReadModelBase):
    """Sales per UTC hour bucket."""

    __tablename__ = "hourly_sales_view"

    hour_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), primary_key=True
    )
    total_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)


class ProductCatalogModel(ReadModelBase):
    """Denormalized product catalog.

    Rows created by a price change for an unseen product carry only the
    price until the product's ProductCreated event arrives.
    """

    __tablename__ = "products_read_view"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    stock: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class SyncStatusModel(ReadModelBase):
    """Singleton row (id = 1) holding the last applied event timestamp."""

    __tablename__ = "sync_status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    last_processed_event_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class ProcessedEventModel(ReadModelBase):
    """Ledger of applied event ids; the projector's idempotency guard."""

    __tablename__ = "processed_events"

    event_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
