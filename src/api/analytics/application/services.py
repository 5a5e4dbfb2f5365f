"""Application service for read-model queries."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from analytics.application.observability import (
    AnalyticsQueryProbe,
    DefaultAnalyticsQueryProbe,
)
from analytics.domain.value_objects import (
    CatalogProduct,
    CategoryMetrics,
    CustomerLifetimeValue,
    HourlySales,
    ProductSales,
    SyncStatus,
)
from analytics.ports.repositories import IAnalyticsRepository
from shared_kernel.events import hour_bucket


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AnalyticsQueryService:
    """Serves point lookups and the staleness indicator of the read model.

    Results reflect the views as of the last projected event; callers see
    eventual consistency with the write side, quantified by
    get_sync_status().
    """

    def __init__(
        self,
        repository: IAnalyticsRepository,
        probe: AnalyticsQueryProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Read-only repository over the views
            probe: Observability probe for logging/metrics
            clock: Source of the current UTC time
        """
        self._repository = repository
        self._probe = probe or DefaultAnalyticsQueryProbe()
        self._clock = clock

    async def get_product_sales(self, product_id: int) -> ProductSales | None:
        result = await self._repository.get_product_sales(product_id)
        self._probe.view_looked_up("product_sales", str(product_id), result is not None)
        return result

    async def get_category_metrics(self, category: str) -> CategoryMetrics | None:
        result = await self._repository.get_category_metrics(category)
        self._probe.view_looked_up("category_metrics", category, result is not None)
        return result

    async def get_customer_lifetime_value(
        self, customer_id: str
    ) -> CustomerLifetimeValue | None:
        result = await self._repository.get_customer_lifetime_value(customer_id)
        self._probe.view_looked_up("customer_ltv", customer_id, result is not None)
        return result

    async def get_hourly_sales(self, hour: datetime) -> HourlySales | None:
        """Sales of the UTC hour containing ``hour``."""
        bucket = hour_bucket(hour)
        result = await self._repository.get_hourly_sales(bucket)
        self._probe.view_looked_up("hourly_sales", bucket.isoformat(), result is not None)
        return result

    async def get_product(self, product_id: int) -> CatalogProduct | None:
        result = await self._repository.get_product(product_id)
        self._probe.view_looked_up("product_catalog", str(product_id), result is not None)
        return result

    async def get_sync_status(self) -> SyncStatus:
        """Report how far the read model lags behind the event stream."""
        last_processed = await self._repository.get_last_processed_event_timestamp()
        status = SyncStatus.at(last_processed, self._clock())
        self._probe.sync_status_read(status.lag_seconds)
        return status
