"""Repository protocols (ports) for the analytics bounded context.

Read-only access to the materialized views. Implementations never write;
the projector is the sole writer of the read model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from analytics.domain.value_objects import (
    CatalogProduct,
    CategoryMetrics,
    CustomerLifetimeValue,
    HourlySales,
    ProductSales,
)


@runtime_checkable
class IAnalyticsRepository(Protocol):
    """Point lookups against the read-model views."""

    async def get_product_sales(self, product_id: int) -> ProductSales | None:
        """Sales aggregates for a product, or None if it never sold."""
        ...

    async def get_category_metrics(self, category: str) -> CategoryMetrics | None:
        """Metrics for a category, matched case-insensitively."""
        ...

    async def get_customer_lifetime_value(
        self, customer_id: str
    ) -> CustomerLifetimeValue | None:
        """Lifetime value of a customer, or None if they never ordered."""
        ...

    async def get_hourly_sales(self, hour: datetime) -> HourlySales | None:
        """Sales in the UTC hour starting at ``hour``."""
        ...

    async def get_product(self, product_id: int) -> CatalogProduct | None:
        """Catalog entry for a product."""
        ...

    async def get_last_processed_event_timestamp(self) -> datetime | None:
        """Timestamp of the last applied event, or None if none was applied."""
        ...
