"""Unit tests for SqlAnalyticsRepository against the SQLite read model."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from analytics.infrastructure.repository import SqlAnalyticsRepository
from projection.infrastructure.models import (
    SYNC_STATUS_ID,
    CategoryMetricsModel,
    CustomerLifetimeValueModel,
    HourlySalesModel,
    SyncStatusModel,
)


class TestSqlAnalyticsRepository:
    """Tests for read-only view queries."""

    @pytest.mark.asyncio
    async def test_category_lookup_is_case_insensitive(self, read_sessionmaker):
        async with read_sessionmaker() as session:
            async with session.begin():
                session.add(
                    CategoryMetricsModel(
                        category_name="Books", total_revenue=Decimal("20"), total_orders=1
                    )
                )

        async with read_sessionmaker() as session:
            metrics = await SqlAnalyticsRepository(session).get_category_metrics("BOOKS")

        assert metrics.category == "Books"
        assert metrics.total_revenue == Decimal("20")

    @pytest.mark.asyncio
    async def test_missing_rows_return_none(self, read_sessionmaker):
        async with read_sessionmaker() as session:
            repository = SqlAnalyticsRepository(session)

            assert await repository.get_product_sales(1) is None
            assert await repository.get_category_metrics("Books") is None
            assert await repository.get_customer_lifetime_value("c1") is None
            assert await repository.get_hourly_sales(datetime(2024, 1, 1, tzinfo=UTC)) is None
            assert await repository.get_product(1) is None
            assert await repository.get_last_processed_event_timestamp() is None

    @pytest.mark.asyncio
    async def test_timestamps_come_back_in_utc(self, read_sessionmaker):
        hour = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        async with read_sessionmaker() as session:
            async with session.begin():
                session.add_all(
                    [
                        HourlySalesModel(
                            hour_timestamp=hour, total_orders=1, total_revenue=Decimal("20")
                        ),
                        CustomerLifetimeValueModel(
                            customer_id="c1",
                            total_spent=Decimal("20"),
                            order_count=1,
                            last_order_date=datetime(2024, 1, 1, 10, 15, tzinfo=UTC),
                        ),
                        SyncStatusModel(
                            id=SYNC_STATUS_ID,
                            last_processed_event_timestamp=datetime(
                                2024, 1, 1, 10, 15, tzinfo=UTC
                            ),
                        ),
                    ]
                )

        async with read_sessionmaker() as session:
            repository = SqlAnalyticsRepository(session)
            sales = await repository.get_hourly_sales(hour)
            customer = await repository.get_customer_lifetime_value("c1")
            last = await repository.get_last_processed_event_timestamp()

        assert sales.hour == hour
        assert customer.last_order_date == datetime(2024, 1, 1, 10, 15, tzinfo=UTC)
        assert last == datetime(2024, 1, 1, 10, 15, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_seeded_empty_sync_row_reads_as_none(self, read_sessionmaker):
        """The migration seeds the singleton with a null timestamp."""
        async with read_sessionmaker() as session:
            async with session.begin():
                session.add(
                    SyncStatusModel(id=SYNC_STATUS_ID, last_processed_event_timestamp=None)
                )

        async with read_sessionmaker() as session:
            repository = SqlAnalyticsRepository(session)
            assert await repository.get_last_processed_event_timestamp() is None
